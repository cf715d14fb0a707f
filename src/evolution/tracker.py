"""Evolution tracker: owns the evolution log (startup, usage, shutdown events) and the JSON evolution report.

The usage report (src.report.usage_report) reads evolution_metrics.usage_patterns written here;
each entry is {"count": N, "last_used": ts, "details": [...]}.
"""

import hashlib
import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from src.core.logging_utils import log_usage_tracked

logger = logging.getLogger(__name__)

INITIAL_VERSION = "0.3.1"
DEFAULT_DETAILS_LIMIT = 10
# Operations used more often than this get a prediction entry on shutdown
PREDICTION_COUNT_THRESHOLD = 5

# Mount name -> capability it enables
MOUNT_CAPABILITIES = {
    "models": "formal_modeling",
    "validation": "fcm_validation",
    "config": "configuration_management",
    "repository": "repository_analysis",
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_ts(ts: str) -> datetime:
    """Parse ISO timestamp; accepts trailing Z from older logs."""
    if ts.endswith("Z"):
        ts = ts[:-1] + "+00:00"
    dt = datetime.fromisoformat(ts)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def bump_patch(version: str) -> str:
    """0.3.1 -> 0.3.2."""
    major, minor, patch = (int(p) for p in version.split("."))
    return f"{major}.{minor}.{patch + 1}"


class EvolutionTracker:
    """Loads, mutates and saves the evolution log under config_dir.

    Not thread-safe; concurrent writers to the same log are assumed serialized externally.
    """

    def __init__(
        self,
        config_dir: str,
        log_file: str = "evolution.log.json",
        tracked_files: Sequence[str] = (),
        mounts: Optional[Dict[str, str]] = None,
        expected_files: Sequence[Tuple[str, str]] = (),
        details_limit: int = DEFAULT_DETAILS_LIMIT,
        report_file: str = "evolution.report.json",
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.config_dir = Path(config_dir)
        self.log_path = self.config_dir / log_file
        self.report_path = self.config_dir / report_file
        self.tracked_files = list(tracked_files)
        self.mounts = dict(mounts or {})
        self.expected_files = list(expected_files)
        self.details_limit = details_limit
        self._clock = clock
        self.log: Dict[str, Any] = {}

    @classmethod
    def from_config(cls, evolution_cfg: Dict[str, Any], **kwargs: Any) -> "EvolutionTracker":
        """Build from get_evolution_config() output."""
        return cls(
            config_dir=evolution_cfg["config_dir"],
            log_file=evolution_cfg.get("log_file") or "evolution.log.json",
            tracked_files=evolution_cfg.get("tracked_files") or (),
            mounts=evolution_cfg.get("mounts") or {},
            expected_files=evolution_cfg.get("expected_files") or (),
            details_limit=evolution_cfg.get("details_limit") or DEFAULT_DETAILS_LIMIT,
            report_file=evolution_cfg.get("report_file") or "evolution.report.json",
            **kwargs,
        )

    def _now_iso(self) -> str:
        return self._clock().isoformat()

    # -----------------------------------------------------------------
    # Load / save
    # -----------------------------------------------------------------

    def load(self) -> bool:
        """Load log from disk. Returns False (and starts a new log) when missing or unreadable."""
        try:
            with open(self.log_path, "r", encoding="utf-8") as f:
                self.log = json.load(f)
            return True
        except (OSError, ValueError) as e:
            logger.info("Creating new evolution log (%s)", e)
            self.log = self.new_log()
            return False

    def new_log(self) -> Dict[str, Any]:
        now = self._now_iso()
        return {
            "meta": {
                "created": now,
                "purpose": "Track FCM configuration evolution and learning",
                "version_format": "semantic versioning (major.minor.patch)",
            },
            "current_state": {
                "version": INITIAL_VERSION,
                "timestamp": now,
                "fcm_compliance": True,
                "validation_status": "pending",
                "active_mounts": [],
                "capabilities": [],
            },
            "evolution_history": [],
            "learning_insights": [],
            "evolution_patterns": [],
            "predicted_evolution": [],
            "evolution_metrics": {},
        }

    def save(self) -> bool:
        """Write log as indented JSON. Returns False on write failure (logged)."""
        try:
            self.log_path.write_text(json.dumps(self.log, indent=2), encoding="utf-8")
            return True
        except OSError as e:
            logger.error("Failed to save evolution log %s: %s", self.log_path, e)
            return False

    @property
    def _state(self) -> Dict[str, Any]:
        return self.log.setdefault("current_state", self.new_log()["current_state"])

    @property
    def _metrics(self) -> Dict[str, Any]:
        # null in older logs is treated as empty
        metrics = self.log.get("evolution_metrics") or {}
        self.log["evolution_metrics"] = metrics
        return metrics

    @property
    def _history(self) -> List[Dict[str, Any]]:
        return self.log.setdefault("evolution_history", [])

    # -----------------------------------------------------------------
    # Startup
    # -----------------------------------------------------------------

    def track_startup(self) -> None:
        logger.info("Tracking startup event")
        self.load()
        self._state["timestamp"] = self._now_iso()
        self._state["validation_status"] = "running"
        self.detect_environment()
        self.detect_configuration_changes()
        self.save()
        logger.info("Startup tracking complete (version=%s)", self._state.get("version"))

    def detect_environment(self) -> None:
        """Active mounts are configured mount paths that exist; capabilities follow from them."""
        capabilities: List[str] = []
        active: List[str] = []
        for name, path in self.mounts.items():
            if not os.path.exists(path):
                continue
            active.append(name)
            cap = MOUNT_CAPABILITIES.get(name)
            if cap:
                capabilities.append(cap)

        validation_dir = self.mounts.get("validation")
        if validation_dir and os.path.exists(os.path.join(validation_dir, "validate-fcm.js")):
            capabilities.append("structural_validation")
        models_dir = self.mounts.get("models")
        if models_dir and os.path.exists(os.path.join(models_dir, "fcm.sidecar.md")):
            capabilities.append("pattern_teaching")

        self._state["active_mounts"] = active
        self._state["capabilities"] = capabilities

    def config_hash(self) -> str:
        """First 16 hex chars of sha256 over the tracked config files that exist."""
        h = hashlib.sha256()
        for name in self.tracked_files:
            path = self.config_dir / name
            if path.exists():
                h.update(path.read_text(encoding="utf-8").encode("utf-8"))
        return h.hexdigest()[:16]

    def detect_configuration_changes(self) -> bool:
        """Record an evolution event on first run or when the config hash changed. Returns True if recorded."""
        current = self.config_hash()
        last = self._history[-1] if self._history else None
        if last is None:
            logger.info("Initial configuration tracking")
        elif last.get("config_hash") and last.get("config_hash") != current:
            logger.info("Configuration changes detected")
        else:
            return False
        self.record_evolution_event(current)
        return True

    def record_evolution_event(self, config_hash: str) -> Dict[str, Any]:
        new_version = bump_patch(self._state.get("version") or INITIAL_VERSION)
        event = {
            "version": new_version,
            "timestamp": self._now_iso(),
            "description": "Automatic configuration evolution detected",
            "config_hash": config_hash,
            "changes": self.detect_specific_changes(),
            "trigger": "configuration_modification",
            "learning": self.capture_current_learning(),
            "fcm_compliance": True,
            "auto_detected": True,
        }
        self._history.append(event)
        self._state["version"] = new_version
        logger.info("Recorded evolution event: %s", new_version)
        return event

    def detect_specific_changes(self) -> List[str]:
        changes = [change for path, change in self.expected_files if os.path.exists(path)]
        return changes or ["configuration refinement"]

    def capture_current_learning(self) -> str:
        mounts = self._state.get("active_mounts") or []
        capabilities = self._state.get("capabilities") or []
        insights = []
        if "models" in mounts:
            insights.append("formal models enable structural validation")
        if "validation" in mounts:
            insights.append("validation tools prevent FCM compliance violations")
        if "pattern_teaching" in capabilities:
            insights.append("formal patterns enable teaching through structure")
        return "; ".join(insights)

    # -----------------------------------------------------------------
    # Usage
    # -----------------------------------------------------------------

    def track_usage(self, operation: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Increment usage_patterns[operation]; keep the last details_limit detail records. Saves."""
        patterns = self._metrics.get("usage_patterns") or {}
        self._metrics["usage_patterns"] = patterns
        entry = patterns.get(operation)
        if not isinstance(entry, dict):
            # Older logs store a bare count
            entry = {"count": int(entry or 0), "last_used": None, "details": []}
            patterns[operation] = entry
        now = self._now_iso()
        entry["count"] = int(entry.get("count") or 0) + 1
        entry["last_used"] = now
        if details:
            entry.setdefault("details", []).append({"timestamp": now, **details})
            if len(entry["details"]) > self.details_limit:
                entry["details"] = entry["details"][-self.details_limit:]
        log_usage_tracked(operation, entry["count"], details_kept=len(entry.get("details") or []))
        self.save()
        return entry

    # -----------------------------------------------------------------
    # Shutdown: trends, predictions
    # -----------------------------------------------------------------

    def analyze_trends(self) -> Optional[Dict[str, float]]:
        """Average interval and velocity over evolution_history. None when fewer than 2 events."""
        history = self._history
        if len(history) < 2:
            logger.info("Not enough evolution history for trend analysis")
            return None
        times = [_parse_ts(h["timestamp"]) for h in history]
        intervals = [(b - a).total_seconds() for a, b in zip(times, times[1:])]
        avg_days = (sum(intervals) / len(intervals)) / 86400.0
        span_days = (self._clock() - times[0]).total_seconds() / 86400.0
        velocity = len(history) / span_days if span_days > 0 else float(len(history))

        self._metrics["avg_evolution_interval_days"] = avg_days
        self._metrics["total_evolutions"] = len(history)
        self._metrics["evolution_velocity"] = velocity
        logger.info(
            "Evolution metrics updated: %s total evolutions, %.1f avg days between",
            len(history), avg_days,
        )
        return {"avg_evolution_interval_days": avg_days, "total_evolutions": len(history), "evolution_velocity": velocity}

    def predict_next_evolution(self) -> List[Dict[str, Any]]:
        patterns = self._metrics.get("usage_patterns") or {}
        predictions = []
        for operation, data in patterns.items():
            count = data.get("count", 0) if isinstance(data, dict) else data
            if (count or 0) > PREDICTION_COUNT_THRESHOLD:
                predictions.append({
                    "trigger": f"frequent_{operation}",
                    "likelihood": "high",
                    "predicted_changes": [f"optimization for {operation}"],
                    "timeline": "short term",
                })
        self.log["predicted_evolution"] = predictions
        return predictions

    def capture_shutdown(self) -> None:
        logger.info("Capturing shutdown learning")
        self.analyze_trends()
        self.predict_next_evolution()
        self._state["validation_status"] = "completed"
        self._state["last_shutdown"] = self._now_iso()
        self.save()
        logger.info("Shutdown learning captured")

    # -----------------------------------------------------------------
    # Report
    # -----------------------------------------------------------------

    def generate_report(self) -> Dict[str, Any]:
        """Write evolution.report.json next to the log and return it."""
        state = self._state
        report = {
            "summary": {
                "current_version": state.get("version"),
                "total_evolutions": len(self._history),
                "fcm_compliance": state.get("fcm_compliance"),
                "active_capabilities": len(state.get("capabilities") or []),
            },
            "recent_evolution": self._history[-3:],
            "learning_insights": (self.log.get("learning_insights") or [])[-5:],
            "usage_summary": self._metrics.get("usage_patterns"),
            "predictions": self.log.get("predicted_evolution") or [],
        }
        self.report_path.write_text(json.dumps(report, indent=2), encoding="utf-8")
        logger.info("Evolution report generated: %s", self.report_path)
        return report


USAGE = "Usage: track_evolution.py [startup|usage|shutdown|report] [operation] [details-json]"


def main(argv: Optional[List[str]] = None, config_path: Optional[str] = None) -> int:
    """CLI: startup | usage <operation> [details-json] | shutdown | report. Unknown command exits 1."""
    from src.config.settings import get_evolution_config, read_config

    args = list(sys.argv[1:] if argv is None else argv)
    command = args[0] if args else "startup"
    try:
        config, _ = read_config(config_path)
        tracker = EvolutionTracker.from_config(get_evolution_config(config))
        if command == "startup":
            tracker.track_startup()
        elif command == "usage":
            operation = args[1] if len(args) > 1 else "unknown"
            details = json.loads(args[2]) if len(args) > 2 else {}
            tracker.load()
            tracker.track_usage(operation, details)
        elif command == "shutdown":
            tracker.load()
            tracker.capture_shutdown()
        elif command == "report":
            tracker.load()
            tracker.generate_report()
        else:
            print(USAGE)
            return 1
    except Exception as e:
        print(f"Evolution tracking failed: {e}", file=sys.stderr)
        return 1
    return 0
