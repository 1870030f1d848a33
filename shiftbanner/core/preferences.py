"""
Preferences - Live view of the user-facing flags in the configuration
"""
from typing import Optional

from .config_service import ConfigService, config as default_config


class Preferences:
    """
    User preferences backed by the config service.

    Values are read on every access so a config edit or reload is picked up
    on the next wake without restarting anything.
    """

    def __init__(self, config_service: Optional[ConfigService] = None):
        self._config = config_service or default_config

    @property
    def use_reference_timezone(self) -> bool:
        """Show the shift in the reference timezone (default True)"""
        return bool(self._config.get('timezone.use_reference', True))

    @property
    def reference_timezone(self) -> str:
        return self._config.get('timezone.reference', 'America/Los_Angeles')

    @property
    def omega_enabled(self) -> bool:
        """Allow the network check to force Omega Shift (default False)"""
        return bool(self._config.get('omega.enabled', False))

    @property
    def vintage_omega(self) -> bool:
        return bool(self._config.get('omega.vintage', False))

    @property
    def bee_shed(self) -> bool:
        """Use the Rustproof Bee Shed banner set"""
        return bool(self._config.get('banners.bee_shed', False))
