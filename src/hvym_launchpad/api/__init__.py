"""API components - read-only snapshot aggregator."""

from hvym_launchpad.api.data_api import LaunchpadDataAPI

__all__ = ["LaunchpadDataAPI"]
