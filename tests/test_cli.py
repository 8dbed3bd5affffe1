from __future__ import annotations

import pytest

import sitemap_crawler.cli as cli_module
from sitemap_crawler.cli import EXIT_INVALID_TARGET, EXIT_OK, EXIT_USAGE, load_usage, main
from sitemap_crawler.core import Crawler


@pytest.fixture()
def patch_fetcher(monkeypatch, site, page):
    """Run the CLI against an in-memory site instead of the network."""
    fetcher = site({
        "http://example.com/": page("http://example.com/about", "http://example.com/gone"),
        "http://example.com/about": page("http://other.org/"),
    })

    class OfflineCrawler(Crawler):
        def __init__(self, **options):
            options.pop("timeout_s")
            options.pop("user_agent")
            super().__init__(fetcher, **options)

    monkeypatch.setattr(cli_module, "Crawler", OfflineCrawler)
    return fetcher


def test_usage_text_is_packaged():
    assert "--target" in load_usage()


def test_usage_option(capsys):
    assert main(["-u"]) == EXIT_OK
    assert capsys.readouterr().out == load_usage()


def test_missing_target_prints_usage_to_stderr(capsys):
    assert main([]) == EXIT_USAGE
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == load_usage()


def test_bad_option_value_exits_with_usage_code():
    with pytest.raises(SystemExit) as exc_info:
        main(["-t", "http://example.com/", "--workers", "0"])
    assert exc_info.value.code == EXIT_USAGE


def test_crawl_writes_sitemap_and_diagnostics_separately(patch_fetcher, capsys):
    assert main(["-t", "http://example.com/"]) == EXIT_OK

    captured = capsys.readouterr()
    assert captured.out == (
        "http://example.com/\n"
        "\thttp://example.com/about\n"
        "\thttp://example.com/gone\n"
    )
    assert 'URL: "http://example.com/gone"' in captured.err


def test_verbose_prints_summary(patch_fetcher, capsys):
    assert main(["--target", "http://example.com/", "--verbose"]) == EXIT_OK

    err = capsys.readouterr().err
    assert "CRAWL SUMMARY" in err
    assert "Total pages visited:    3" in err
    assert "Pages that could not be read: 1" in err


def test_max_pages_option(patch_fetcher, capsys):
    assert main(["-t", "http://example.com/", "--max-pages", "1"]) == EXIT_OK
    assert capsys.readouterr().out == "http://example.com/\n"


def test_invalid_target_exit_code(patch_fetcher, capsys):
    assert main(["-t", "localhost"]) == EXIT_INVALID_TARGET

    captured = capsys.readouterr()
    assert captured.out == ""
    assert 'Unable to parse target URL. Target URL: "localhost"' in captured.err
