"""
Pytest configuration and fixtures.
"""

import pytest
import os
import sys
import tempfile
import json
from unittest.mock import Mock

import requests

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.entity import TrackedEntity, UpstreamConfig


@pytest.fixture
def temp_state_file():
    """Create a temporary state file for testing."""
    fd, path = tempfile.mkstemp(suffix='.json')
    os.close(fd)
    with open(path, 'w') as f:
        json.dump({}, f)
    yield path
    if os.path.exists(path):
        os.unlink(path)


@pytest.fixture
def make_response():
    """Factory for mock GitHub API responses."""
    def _make(status_code=200, json_data=None, headers=None):
        response = Mock()
        response.status_code = status_code
        response.headers = headers if headers is not None else {'X-RateLimit-Remaining': '4999'}
        response.json.return_value = json_data
        if status_code >= 400:
            response.raise_for_status.side_effect = requests.exceptions.HTTPError(
                f"{status_code} Error"
            )
        else:
            response.raise_for_status = Mock()
        return response
    return _make


@pytest.fixture
def make_entity():
    """Factory for tracked entities."""
    def _make(entity_id, repo=None, latest_version=None, prerelease=False):
        upstream = None
        if repo is not None:
            upstream = UpstreamConfig(
                repo=repo,
                prerelease=prerelease,
                latest_version=latest_version
            )
        return TrackedEntity(id=entity_id, name=entity_id, upstream=upstream)
    return _make


@pytest.fixture
def sample_config():
    """Sample entity configuration for testing."""
    return {
        'widget': {
            'name': 'Widget',
            'upstream': {
                'repo': 'acme/widget',
                'version': 'v2.0',
                'prerelease': 'true',
            }
        },
        'plain': {
            'name': 'Plain container',
        }
    }
