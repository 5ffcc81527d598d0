from multibody.common.core.logging_config import setup_logging as common_setup_logging

from ..config import BinderConfig, config


def setup_logging(binder_config: BinderConfig = config):
    """
    Load the YAML config and initialize logging.
    """
    common_setup_logging(binder_config.LOG_CONFIG_PATH)
