"""Tests for valet.server.dispatch — static/dynamic classification."""

import json
from pathlib import Path

import pytest

from valet.config import ValetConfig
from valet.context import request_scope
from valet.drivers.basic import BasicValetDriver
from valet.drivers.frameworks import JigsawValetDriver
from valet.drivers.registry import DriverLoader
from valet.drivers.resolver import DriverResolver
from valet.server.dispatch import Outcome, classify, dispatch, normalize_request_uri
from valet.server.not_found import render_not_found


@pytest.fixture
def site(tmp_path: Path) -> Path:
    site = tmp_path / "blog"
    site.mkdir()
    return site


@pytest.fixture
def resolver(tmp_path: Path) -> DriverResolver:
    config = ValetConfig(home_path=tmp_path / "home", static_prefix="static-prefix")
    return DriverResolver(config, loader=DriverLoader())


class TestNormalizeRequestUri:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("/", "/"),
            ("/posts?page=2", "/posts"),
            ("/my%20file.txt", "/my file.txt"),
            ("", "/"),
            ("?x=1", "/"),
        ],
    )
    def test_normalize(self, raw: str, expected: str) -> None:
        assert normalize_request_uri(raw) == expected


class TestClassify:
    def test_static_file(self, site: Path) -> None:
        (site / "style.css").write_text("body {}")

        result = classify(BasicValetDriver(), str(site), "blog", "/style.css")

        assert result.outcome is Outcome.STATIC
        assert result.path == str(site / "style.css")
        assert result.driver == "BasicValetDriver"

    def test_php_files_are_never_static(self, site: Path) -> None:
        (site / "info.php").write_text("<?php")

        with request_scope():
            result = classify(BasicValetDriver(), str(site), "blog", "/info.php")

        assert result.outcome is Outcome.DYNAMIC
        assert result.path == str(site / "info.php")

    def test_site_root_is_never_static(self, site: Path) -> None:
        (site / "index.html").write_text("<h1>Home</h1>")

        with request_scope():
            result = classify(BasicValetDriver(), str(site), "blog", "/")

        assert result.outcome is Outcome.DYNAMIC

    def test_not_served(self, site: Path) -> None:
        with request_scope():
            result = classify(BasicValetDriver(), str(site), "blog", "/anything")

        assert result.outcome is Outcome.NOT_SERVED
        assert result.path is None

    def test_uses_mutated_uri(self, site: Path) -> None:
        (site / "build_local").mkdir()
        (site / "build_local" / "index.html").write_text("<h1>Built</h1>")

        result = classify(JigsawValetDriver(), str(site), "blog", "/")

        assert result.uri == "/build_local"
        assert result.outcome is Outcome.STATIC
        assert result.path == str(site / "build_local" / "index.html")


class TestDispatch:
    def test_static_response(self, site: Path, resolver: DriverResolver) -> None:
        (site / "style.css").write_text("body {}")

        with request_scope():
            result = dispatch(str(site), "blog", "/style.css?v=3", resolver=resolver)

        assert result.classification.outcome is Outcome.STATIC
        assert result.response is not None
        assert result.response.get_header("X-Accel-Redirect") == f"/static-prefix{site / 'style.css'}"
        assert result.response.get_header("Content-Type") is None

    def test_encoded_question_mark_in_file_name(self, site: Path, resolver: DriverResolver) -> None:
        (site / "what?.txt").write_text("yes")

        result = dispatch(str(site), "blog", "/what%3F.txt?v=1", resolver=resolver)

        assert result.classification.outcome is Outcome.STATIC
        assert result.classification.path == str(site / "what?.txt")

    def test_dynamic_has_no_response(self, site: Path, resolver: DriverResolver) -> None:
        (site / "index.php").write_text("<?php")

        with request_scope({"HTTP_HOST": "blog.test"}):
            result = dispatch(str(site), "blog", "/anything", resolver=resolver)

        assert result.driver.name == "BasicValetDriver"
        assert result.classification.outcome is Outcome.DYNAMIC
        assert result.classification.path == str(site / "index.php")
        assert result.response is None
        assert result.server["SCRIPT_FILENAME"] == str(site / "index.php")
        assert result.server["SERVER_NAME"] == "blog.test"

    def test_not_served_renders_404(self, site: Path, resolver: DriverResolver) -> None:
        with request_scope():
            result = dispatch(str(site), "blog", "/anything", resolver=resolver)

        assert result.classification.outcome is Outcome.NOT_SERVED
        assert result.response is not None
        assert result.response.status == 404
        assert "404 - Not Found" in result.response.text
        assert "/anything" in result.response.text

    def test_environment_variables_reach_server(self, site: Path, resolver: DriverResolver) -> None:
        (site / "index.php").write_text("<?php")
        (site / ".valet-env.json").write_text(json.dumps({"blog": {"FOO": "bar"}}))

        with request_scope():
            result = dispatch(str(site), "blog", "/", resolver=resolver)

        assert result.server["FOO"] == "bar"

    def test_other_site_gets_no_variables(self, site: Path, resolver: DriverResolver) -> None:
        (site / "index.php").write_text("<?php")
        (site / ".valet-env.json").write_text(json.dumps({"shop": {"FOO": "bar"}}))

        with request_scope():
            result = dispatch(str(site), "blog", "/", resolver=resolver)

        assert "FOO" not in result.server

    def test_custom_env_file_name(self, site: Path, tmp_path: Path) -> None:
        (site / "index.php").write_text("<?php")
        (site / "env.json").write_text(json.dumps({"blog": {"FOO": "bar"}}))
        config = ValetConfig(home_path=tmp_path / "home", env_file_name="env.json")

        with request_scope():
            result = dispatch(str(site), "blog", "/", resolver=DriverResolver(config, loader=DriverLoader()))

        assert result.server["FOO"] == "bar"

    def test_framework_site(self, site: Path, resolver: DriverResolver) -> None:
        (site / "public").mkdir()
        (site / "public" / "index.php").write_text("<?php")
        (site / "artisan").write_text("")

        with request_scope():
            result = dispatch(str(site), "blog", "/users/1", resolver=resolver)

        assert result.driver.name == "LaravelValetDriver"
        assert result.classification.path == str(site / "public" / "index.php")

    def test_unscoped_calls_do_not_share_variables(self, tmp_path: Path, resolver: DriverResolver) -> None:
        shop = tmp_path / "shop"
        blog = tmp_path / "blog2"
        for path in (shop, blog):
            path.mkdir()
            (path / "index.php").write_text("<?php")
        (shop / ".valet-env.json").write_text(json.dumps({"shop": {"FOO": "bar"}}))

        first = dispatch(str(shop), "shop", "/", resolver=resolver)
        second = dispatch(str(blog), "blog2", "/", resolver=resolver)

        assert first.server["FOO"] == "bar"
        assert "FOO" not in second.server
        assert second.server["SCRIPT_FILENAME"] == str(blog / "index.php")

    def test_active_scope_receives_variables(self, site: Path, resolver: DriverResolver) -> None:
        (site / "index.php").write_text("<?php")

        with request_scope() as server:
            dispatch(str(site), "blog", "/", resolver=resolver)

        assert server["SCRIPT_FILENAME"] == str(site / "index.php")


class TestNotFoundPage:
    def test_escapes_uri(self) -> None:
        body = render_not_found("blog", "/<script>alert(1)</script>")
        assert "<script>alert(1)</script>" not in body
        assert "blog" in body
