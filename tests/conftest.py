from __future__ import annotations

import logging

import pytest

from news_archive_scraper.config import make_config

from fakes import BASE_URL


@pytest.fixture
def cfg():
    return make_config({"site": {"base_url": BASE_URL}})


@pytest.fixture
def logger():
    return logging.getLogger("news_archive_scraper.tests")
