import logging
from logging import config as logging_config
import os
import sys

import yaml

# python-miio logs every packet at debug level
NOISY_LOGGERS = ('miio.miioprotocol', 'miio.protocol')


def ensure_directories_for_file_handlers(config_dict):
    for handler in config_dict.get('handlers', {}).values():
        log_dir = os.path.dirname(handler.get('filename', ''))
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)


def setup_logging():
    if setup_logging.configured:
        return

    config_file = os.getenv('LOG_CONFIG_FILE', 'logger.conf.default.yaml')
    try:
        with open(config_file) as f_config:
            config_dict = yaml.load(f_config, Loader=yaml.FullLoader)
        ensure_directories_for_file_handlers(config_dict)
        logging_config.dictConfig(config_dict)
        setup_logging.configured = True
    except (FileNotFoundError, ValueError) as ex:
        # Logging is not available, so write directly to stdout
        logging.root.setLevel(logging.INFO)
        logging.root.addHandler(logging.StreamHandler(sys.stdout))
        logging.getLogger(__name__).error(
            f'***** COULD NOT FIND/LOAD LOG CONFIGURATION FILE {config_file} (reason: {ex}): '
            f'LOGGING WILL NOT WORK CORRECTLY! *****')

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.INFO, logging.getLogger(name).level))


setup_logging.configured = False  # type: ignore
