"""Test utilities for building configs and mocked GitHub responses."""

from typing import Any, Callable, Dict, List, Tuple, Union
from unittest.mock import Mock

import requests

from request_review.data_types import ReviewConfig


def build_config(**sections: Any) -> ReviewConfig:
    """
    Build a ReviewConfig from keyword sections.

    Example:
        build_config(reviewers={"defaults": ["dr-mario"]}, options={...})
    """
    return ReviewConfig.from_dict(dict(sections))


def mock_response(status_code: int = 200, json_data: Any = None) -> Mock:
    """Mock a requests.Response; 4xx/5xx raise on raise_for_status()."""
    response = Mock()
    response.status_code = status_code
    response.json.return_value = json_data
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} Client Error"
        )
    return response


Routed = Union[Mock, Exception, List[Mock]]


def route_requests(routes: Dict[Tuple[str, str], Routed]) -> Callable[..., Mock]:
    """
    Build a side effect for `session.request` answering by (method, url).

    A list answers successive calls in order (pagination); an exception
    is raised instead of answering.
    """

    def fake_request(method: str, url: str, **kwargs: Any) -> Mock:
        answer = routes[(method, url)]
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, list):
            return answer.pop(0)
        return answer

    return fake_request
