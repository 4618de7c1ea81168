import logging

import pytest

from dmarc_report_decoder.logging import configure_logging


@pytest.fixture(name="reset_logging_config")
def fixture_reset_logging_config():
    yield None
    logging.Logger.manager.loggerDict.clear()
    configure_logging({}, debug=True)
