from confswap.config.io import (
    apply_overrides as apply_overrides,
)
from confswap.config.io import (
    clear_config_cache as clear_config_cache,
)
from confswap.config.io import (
    get_merged_config as get_merged_config,
)
from confswap.config.models import ConfswapConfig as ConfswapConfig
from confswap.config.models import LogLevel as LogLevel
