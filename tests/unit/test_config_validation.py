"""
Tests for linker configuration loading and validation.
"""

import json

import pytest

from tracker_link.config.linker_config import (
    ConfigLoader,
    ConfigValidator,
    EnvConfigLoader,
    LinkerConfig,
    build_linker,
    DEFAULT_URL_ENV_VAR,
)
from tracker_link.services.reference_matcher import DEFAULT_LINK_TEMPLATE
from tracker_link.exceptions import ConfigurationError, ValidationError

BUG_URL = 'http://bugs.example.org/show_bug.cgi?id=%n'
CLIENT_URL = 'http://crm.example.org/request?id=%n'


def write_config(path, data):
    path.write_text(json.dumps(data), encoding='utf-8')
    return str(path)


class TestLinkerConfig:
    """Test LinkerConfig validation."""

    def test_defaults(self):
        config = LinkerConfig()

        assert config.keywords == {}
        assert config.default_url is None
        assert config.default_keyword is None
        assert config.allow_https is False
        assert config.link_template == DEFAULT_LINK_TEMPLATE

    def test_both_defaults_rejected(self):
        with pytest.raises(ValidationError):
            LinkerConfig(keywords={'bug': BUG_URL}, default_url=CLIENT_URL, default_keyword='bug')

    def test_unknown_default_keyword(self):
        with pytest.raises(ValidationError) as exc_info:
            LinkerConfig(keywords={'bug': BUG_URL}, default_keyword='ticket')
        assert 'ticket' in str(exc_info.value)

    def test_default_keyword_case_insensitive(self):
        config = LinkerConfig(keywords={'Bug': BUG_URL}, default_keyword='BUG')
        assert config.default_keyword == 'BUG'

    @pytest.mark.parametrize("template", ['<a>{text}</a>', '{url}', 'plain'])
    def test_link_template_placeholders(self, template):
        with pytest.raises(ValidationError):
            LinkerConfig(link_template=template)

    @pytest.mark.parametrize("template", [
        "<a href='{url}' title='{title}'>{text}</a>",
        '{url} {text} {0}',
        '{url} {text} {',
        '{url} {text} {url.scheme}',
    ])
    def test_link_template_unknown_fields(self, template):
        """Test that templates which cannot be rendered are rejected up front."""
        with pytest.raises(ValidationError) as exc_info:
            LinkerConfig(link_template=template)
        assert 'Invalid link template' in str(exc_info.value)


class TestConfigValidator:
    """Test validation of raw configuration data."""

    def test_not_a_mapping(self):
        with pytest.raises(ConfigurationError):
            ConfigValidator.validate_linker_data(['bug'])

    def test_keywords_not_a_mapping(self):
        with pytest.raises(ConfigurationError):
            ConfigValidator.validate_linker_data({'keywords': ['bug', BUG_URL]})

    def test_empty_keyword_url(self):
        with pytest.raises(ValidationError):
            ConfigValidator.validate_linker_data({'keywords': {'bug': ''}})

    def test_non_string_default(self):
        with pytest.raises(ConfigurationError):
            ConfigValidator.validate_linker_data({'default_url': 42})


class TestConfigLoader:
    """Test loading configuration from files and dictionaries."""

    def test_load_from_dict(self):
        config = ConfigLoader.load_from_dict({
            'keywords': {'bug': BUG_URL},
            'default_url': CLIENT_URL,
            'allow_https': True,
        })

        assert config.keywords == {'bug': BUG_URL}
        assert config.default_url == CLIENT_URL
        assert config.allow_https is True

    def test_load_from_file(self, tmp_path):
        path = write_config(tmp_path / 'config.json', {
            'keywords': {'bug': BUG_URL, 'ct': CLIENT_URL},
            'default_keyword': 'ct',
        })

        config = ConfigLoader.load_from_file(path)

        assert config.keywords == {'bug': BUG_URL, 'ct': CLIENT_URL}
        assert config.default_keyword == 'ct'

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigLoader.load_from_file(str(tmp_path / 'missing.json'))
        assert 'Configuration file not found' in str(exc_info.value)

    def test_directory_path(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigLoader.load_from_file(str(tmp_path))
        assert 'not a file' in str(exc_info.value)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / 'config.json'
        path.write_text('{"keywords": ', encoding='utf-8')

        with pytest.raises(ConfigurationError) as exc_info:
            ConfigLoader.load_from_file(str(path))
        assert 'Invalid JSON' in str(exc_info.value)


class TestEnvConfigLoader:
    """Test environment overrides for the default search."""

    def test_default_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv(DEFAULT_URL_ENV_VAR, CLIENT_URL)
        path = write_config(tmp_path / 'config.json', {'keywords': {'bug': BUG_URL}})

        config = EnvConfigLoader.load_from_file(path)

        assert config.default_url == CLIENT_URL

    def test_configured_default_wins(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv(DEFAULT_URL_ENV_VAR, CLIENT_URL)
        path = write_config(tmp_path / 'config.json', {
            'keywords': {'bug': BUG_URL},
            'default_keyword': 'bug',
        })

        config = EnvConfigLoader.load_from_file(path)

        assert config.default_url is None
        assert config.default_keyword == 'bug'

    def test_default_from_dotenv_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv(DEFAULT_URL_ENV_VAR, raising=False)
        (tmp_path / '.env').write_text(f'{DEFAULT_URL_ENV_VAR}={CLIENT_URL}\n', encoding='utf-8')
        path = write_config(tmp_path / 'config.json', {})

        try:
            config = EnvConfigLoader.load_from_file(path)
        finally:
            monkeypatch.delenv(DEFAULT_URL_ENV_VAR, raising=False)

        assert config.default_url == CLIENT_URL


class TestBuildLinker:
    """Test creating a linker from a configuration."""

    def test_build_with_default_keyword(self):
        linker = build_linker(LinkerConfig(keywords={'bug': BUG_URL, 'ct': CLIENT_URL},
                                           default_keyword='ct'))

        assert linker.keywords() == ['bug', 'ct']
        assert linker.default() == CLIENT_URL

    def test_single_keyword_no_implicit_default(self):
        linker = build_linker(LinkerConfig(keywords={'bug': BUG_URL}))

        assert linker.default() is None
        assert linker.process('#5') == '#5'

    def test_build_with_default_url_and_template(self):
        linker = build_linker(LinkerConfig(default_url=CLIENT_URL,
                                           link_template='[{text}]({url})'))

        assert linker.process('#5') == '[#5](http://crm.example.org/request?id=5)'

    def test_invalid_keyword_url(self):
        with pytest.raises(ValidationError) as exc_info:
            build_linker(LinkerConfig(keywords={'bug': 'http://bugs.example.org/'}))
        assert "Invalid search for keyword 'bug'" in str(exc_info.value)

    def test_https_requires_opt_in(self):
        config = LinkerConfig(default_url='https://crm.example.org/?id=%n')
        with pytest.raises(ValidationError):
            build_linker(config)

        config.allow_https = True
        assert build_linker(config).default() == 'https://crm.example.org/?id=%n'
