"""Notify gate: ordered checks deciding whether a notice or metric may be sent.

Each check takes the notifier config and an optional metric and returns a
settled ``Promise``. ``check_notify_ability`` runs them in order and returns
the first rejection, so an incomplete config is reported before an ignored
environment, and both before a disabled feature.
"""

from __future__ import annotations

import logging
import re
from functools import partial
from typing import TYPE_CHECKING, Any, Optional

from notice_metrics import MetricKind
from notice_patterns import LOG_LABEL
from notice_promise import Promise, first_rejected

if TYPE_CHECKING:
    from notice_config import NotifierConfig

logger = logging.getLogger(__name__)

REQUIRED_ID_MSG = "project_id is required"
REQUIRED_KEY_MSG = "project_key is required"
IGNORED_ENV_MSG = "current environment '{}' is ignored"

ERROR_NOTIFICATIONS_FEATURE = "Error Notifications"
PERFORMANCE_STATS_FEATURE = "Performance Stats"
QUERY_STATS_FEATURE = "Query Stats"
JOB_STATS_FEATURE = "Job Stats"

# Metric kinds gated by a toggle of their own, on top of performance_stats
_KIND_TOGGLES: dict[MetricKind, tuple[str, str]] = {
    MetricKind.QUERY: ("query_stats", QUERY_STATS_FEATURE),
    MetricKind.QUEUE: ("job_stats", JOB_STATS_FEATURE),
}


def feature_disabled(feature: str) -> Promise:
    return Promise.rejected(f"The {feature} feature is disabled")


def _valid_project_id(project_id: Any) -> bool:
    try:
        return int(project_id) > 0
    except (TypeError, ValueError):
        return False


def check_config_completeness(config: NotifierConfig, metric: Any = None) -> Promise:
    """Reject unless the identifying project fields are set."""
    if not _valid_project_id(config.project_id):
        return Promise.rejected(REQUIRED_ID_MSG)
    if not isinstance(config.project_key, str) or not config.project_key:
        return Promise.rejected(REQUIRED_KEY_MSG)
    return Promise.resolved("ok")


def _environment_matches(environment: str, pattern: Any) -> bool:
    if isinstance(pattern, re.Pattern):
        return pattern.search(environment) is not None
    return environment == str(pattern)


def check_environment(config: NotifierConfig, metric: Any = None) -> Promise:
    """Reject when the current environment is in ``ignore_environments``.

    An unset environment never matches; a non-empty ignore list is then
    reported as having no effect.
    """
    if not config.ignore_environments:
        return Promise.resolved("ok")

    if config.environment is None:
        config.logger.warning(
            f"{LOG_LABEL} the 'environment' option is not set, "
            "'ignore_environments' has no effect"
        )
        return Promise.resolved("ok")

    env = str(config.environment)
    if any(_environment_matches(env, p) for p in config.ignore_environments):
        logger.debug("Environment %s is ignored", env)
        return Promise.rejected(IGNORED_ENV_MSG.format(env))
    return Promise.resolved("ok")


def check_feature_toggles(config: NotifierConfig, metric: Any = None) -> Promise:
    """Reject reports whose feature is switched off.

    ``metric=None`` stands for an error notice. Metric kinds without a toggle
    of their own only depend on ``performance_stats``.
    """
    if metric is None:
        if not config.error_notifications:
            return feature_disabled(ERROR_NOTIFICATIONS_FEATURE)
        return Promise.resolved("ok")

    if not config.performance_stats:
        return feature_disabled(PERFORMANCE_STATS_FEATURE)

    toggle = _KIND_TOGGLES.get(getattr(metric, "kind", None))
    if toggle is not None:
        option, feature = toggle
        if not getattr(config, option):
            return feature_disabled(feature)
    return Promise.resolved("ok")


NOTIFY_CHECKS = (check_config_completeness, check_environment, check_feature_toggles)


def check_configuration(config: NotifierConfig) -> Promise:
    """Completeness and environment checks, without feature toggles."""
    return first_rejected(
        [partial(check, config) for check in NOTIFY_CHECKS[:2]], "ok"
    )


def check_notify_ability(config: NotifierConfig, metric: Optional[Any] = None) -> Promise:
    """Run every notify check in order; resolve with ``metric`` if all pass."""
    return first_rejected(
        [partial(check, config, metric) for check in NOTIFY_CHECKS], metric
    )
