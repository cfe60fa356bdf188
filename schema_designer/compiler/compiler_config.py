# Copyright 2026 TIER IV, inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Configuration management for the schema compiler."""

import os
import logging
from dataclasses import dataclass

from ..utils.logging_utils import configure_split_stream_logging


@dataclass
class CompilerConfig:
    """Configuration class for schema compilation."""
    log_level: str = "INFO"
    print_level: str = "ERROR"
    cache_enabled: bool = True
    # Reject notation files whose minor format version is newer than supported.
    strict_format_version: bool = False

    @classmethod
    def from_env(cls) -> 'CompilerConfig':
        """Create configuration from environment variables."""
        return cls(
            log_level=os.getenv('SCHEMA_DESIGNER_LOG_LEVEL', 'INFO'),
            print_level=os.getenv('SCHEMA_DESIGNER_PRINT_LEVEL', 'ERROR'),
            cache_enabled=os.getenv('SCHEMA_DESIGNER_CACHE_ENABLED', 'true').lower() == 'true',
            strict_format_version=os.getenv('SCHEMA_DESIGNER_STRICT_FORMAT_VERSION', 'false').lower() == 'true',
        )

    def set_logging(self) -> logging.Logger:
        """Setup logging based on configuration."""
        level = getattr(logging, self.log_level.upper(), logging.INFO)
        stderr_level = getattr(logging, self.print_level.upper(), logging.ERROR)

        formatter = logging.Formatter('%(name)s - %(levelname)s - %(message)s')
        return configure_split_stream_logging(
            level=level, stderr_level=stderr_level, formatter=formatter, logger_name='schema_designer'
        )


# Global configuration instance
compiler_config = CompilerConfig.from_env()
