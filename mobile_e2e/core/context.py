"""
Run context threaded through every component instead of process-wide state.
"""

from dataclasses import dataclass, field
from typing import Optional

from mobile_e2e.config.config import Config, Platform, normalize_platform
from mobile_e2e.core.polling import SYSTEM_CLOCK, Clock
from mobile_e2e.utils.artifacts import ArtifactWriter


@dataclass(frozen=True)
class RunContext:
    """Platform, configuration, clock and artifact writer for one test run."""
    platform: Platform
    config: Config
    clock: Clock = field(default=SYSTEM_CLOCK)
    artifacts: Optional[ArtifactWriter] = None

    @classmethod
    def from_config(cls, config: Config, platform: Optional[str] = None,
                    clock: Optional[Clock] = None) -> 'RunContext':
        return cls(
            platform=normalize_platform(platform) if platform else config.platform,
            config=config,
            clock=clock or SYSTEM_CLOCK,
            artifacts=ArtifactWriter(config.reports_dir),
        )

    @property
    def is_android(self) -> bool:
        return self.platform == 'android'

    @property
    def is_ios(self) -> bool:
        return self.platform == 'ios'
