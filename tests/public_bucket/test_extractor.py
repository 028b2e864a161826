import pytest
from flask import Flask

from public_bucket import BearerExtractor, MissingToken


def test_bearer_extractor_missing(app: Flask):
    extractor = BearerExtractor()

    with app.test_request_context("/", headers={}):
        with pytest.raises(MissingToken, match="No token provided"):
            extractor.extract()


def test_bearer_extractor_ok(app: Flask):
    extractor = BearerExtractor()

    with app.test_request_context("/", headers={"Authorization": "Bearer abc.def.ghi"}):
        assert extractor.extract() == "abc.def.ghi"


@pytest.mark.parametrize(
    "header",
    [
        "bearer abc.def.ghi",
        "Basic dXNlcjpwYXNz",
        "Bearer",
        "Bearer ",
        "Bearer abc.def.ghi extra",
        "Bearer  abc.def.ghi",
    ],
)
def test_bearer_extractor_rejects_other_shapes(app: Flask, header: str):
    extractor = BearerExtractor()

    with app.test_request_context("/", headers={"Authorization": header}):
        with pytest.raises(MissingToken):
            extractor.extract()
