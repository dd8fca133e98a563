import random

import pytest

from behaviorbin.behaviors import UNCACHEABLE


class TestSingleStatus:
    """Tests for /status/<code> with one candidate."""

    def test_success_code_has_empty_body(self, client):
        """A code below 300 is sent with no body."""
        response = client.get("/status/201")
        assert response.status_code == 201
        assert response.content == b""

    def test_error_code_uses_reason_phrase(self, client):
        """Codes of 300 and above carry their reason phrase as body."""
        response = client.get("/status/418")
        assert response.status_code == 418
        assert response.text == "I'm a Teapot"

    def test_redirect_class_code(self, client):
        response = client.get("/status/307", follow_redirects=False)
        assert response.status_code == 307
        assert response.text == "Temporary Redirect"

    def test_unregistered_code_has_empty_phrase(self, client):
        response = client.get("/status/599")
        assert response.status_code == 599
        assert response.text == ""

    def test_not_modified_has_no_body(self, client):
        response = client.get("/status/304")
        assert response.status_code == 304
        assert response.content == b""

    def test_single_code_is_cacheable(self, client):
        response = client.get("/status/200")
        assert "cache-control" not in response.headers
        assert "surrogate-control" not in response.headers

    def test_code_above_999_becomes_400(self, client):
        """Out of range codes never reach the wire."""
        response = client.get("/status/1000")
        assert response.status_code == 400
        assert response.text == "Bad Request"

    @pytest.mark.parametrize("code", [100, 101, 199])
    def test_informational_code_becomes_400(self, client, code):
        """A 1xx can never be the final status."""
        response = client.get(f"/status/{code}")
        assert response.status_code == 400
        assert response.text == "Bad Request"

    def test_non_integer_is_rejected(self, client):
        response = client.get("/status/teapot")
        assert response.status_code == 400
        assert response.text == "Invalid status"


class TestMultipleStatus:
    """Tests for /status/<code,code,...>."""

    def test_picks_one_of_the_candidates(self, make_client):
        """Every draw lands on one of the listed codes."""
        client = make_client(rng=random.Random(7))
        seen = {client.get("/status/200,404,500").status_code for _ in range(40)}
        assert seen <= {200, 404, 500}
        assert len(seen) > 1

    def test_marks_response_uncacheable(self, client):
        response = client.get("/status/200,404,500")
        assert response.headers["cache-control"] == "no-store, max-age=0"
        assert response.headers["surrogate-control"] == "max-age=31557600"

    def test_any_invalid_candidate_is_rejected(self, client):
        """Validation does not depend on which candidate would be drawn."""
        for _ in range(10):
            response = client.get("/status/200,abc")
            assert response.status_code == 400
            assert response.text == "Invalid status"
            assert response.headers["cache-control"] == UNCACHEABLE["Cache-Control"]

    def test_duplicate_candidates_are_allowed(self, client):
        assert client.get("/status/204,204").status_code == 204
