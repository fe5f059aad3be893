from http import HTTPStatus
import pytest
from catalog_api.api.http_utils import handle_domain_errors, to_http_error
from catalog_api.core.errors import (
    AggregateFailure, DomainError, Forbidden, InvalidArgument, NotFound,
    WriteConflict,
)
from fastapi import HTTPException


@pytest.mark.parametrize("error, status", [
    (NotFound("comment_not_found"), HTTPStatus.NOT_FOUND),
    (Forbidden("not_comment_author"), HTTPStatus.FORBIDDEN),
    (InvalidArgument("rating_out_of_range"),
     HTTPStatus.UNPROCESSABLE_ENTITY),
    (WriteConflict(), HTTPStatus.CONFLICT),
])
def test_to_http_error_maps_kind_and_keeps_code(error, status):
    e = to_http_error(error)
    assert e.status_code == status
    assert e.detail == error.detail


def test_aggregate_failure_detail_lists_failed_items():
    e = to_http_error(AggregateFailure("x", ["c1"]))
    assert e.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert e.detail == {"code": "aggregate_failure",
                        "username": "x", "failed": ["c1"]}


async def test_handle_domain_errors_maps_known_error():
    @handle_domain_errors()
    async def fn():
        raise NotFound("comment_not_found")
    with pytest.raises(HTTPException) as e:
        await fn()
    assert e.value.status_code == HTTPStatus.NOT_FOUND
    assert e.value.detail == "comment_not_found"


async def test_handle_domain_errors_maps_unknown_kind_to_500():
    @handle_domain_errors({NotFound: HTTPStatus.NOT_FOUND})
    async def fn():
        raise DomainError("something_else")
    with pytest.raises(HTTPException) as e:
        await fn()
    assert e.value.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert e.value.detail == "internal_error"


async def test_handle_domain_errors_lets_other_errors_through():
    @handle_domain_errors()
    async def fn():
        raise RuntimeError("store down")
    with pytest.raises(RuntimeError):
        await fn()


async def test_handle_domain_errors_happy_path_returns_value():
    @handle_domain_errors()
    async def ok():
        return "ok"
    assert await ok() == "ok"
