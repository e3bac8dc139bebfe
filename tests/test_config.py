"""Tests for runtime configuration.

Validates environment defaults, eager validation, the snapshot store with
subscribers, and context-local overrides.
"""

from threading import Thread

import pytest

from rastro import (
    ConfigError,
    LogLevel,
    MonitoredNameSet,
    RastroConfig,
    apply_preset,
    config_context,
    configure,
    get_config,
    reset_config,
)
from rastro.config import PRESETS, ConfigStore, detect_environment


class TestRastroConfigDataclass:
    """Test RastroConfig frozen dataclass behavior."""

    def test_default_values(self) -> None:
        """A bare config is the quiet production setup."""
        config = RastroConfig()
        assert config.environment == "production"
        assert config.level is LogLevel.WARN
        assert config.include_source_path == "auto"
        assert config.include_stack_trace is False
        assert config.silent is False
        assert config.entry_filter is None
        assert config.entry_transformer is None
        assert config.should_include_source_path is False

    def test_immutability(self) -> None:
        """Config is frozen and cannot be modified."""
        config = RastroConfig()
        with pytest.raises(AttributeError):
            config.silent = True  # type: ignore[misc]

    def test_level_coerced(self) -> None:
        """Level names are accepted case-insensitively."""
        assert RastroConfig(level="DEBUG").level is LogLevel.DEBUG  # type: ignore[arg-type]

    def test_names_mapping_coerced(self) -> None:
        """A plain mapping of name groups becomes a MonitoredNameSet."""
        config = RastroConfig(names={"hooks": {"useThing"}})  # type: ignore[arg-type]
        assert isinstance(config.names, MonitoredNameSet)
        assert config.names.hooks == frozenset({"useThing"})


class TestValidation:
    """Invalid values fail at construction."""

    @pytest.mark.parametrize(
        ("kwargs", "field"),
        [
            ({"environment": "staging"}, "environment"),
            ({"level": "verbose"}, "level"),
            ({"include_source_path": "yes"}, "include_source_path"),
            ({"names": {"hooks": {"use-thing"}}}, "hooks"),
            ({"names": {"hooks": {"withLogger"}}}, "wrappers"),
        ],
    )
    def test_invalid_field(self, kwargs: dict, field: str) -> None:
        """The error names the offending field."""
        with pytest.raises(ConfigError) as exc_info:
            RastroConfig(**kwargs)
        assert exc_info.value.field == field
        assert str(exc_info.value).startswith(f"{field}: ")


class TestEnvironment:
    """Environment detection and environment-dependent defaults."""

    @pytest.mark.parametrize(
        ("environ", "expected"),
        [
            ({}, "production"),
            ({"NODE_ENV": "development"}, "development"),
            ({"RASTRO_ENV": "Test", "NODE_ENV": "development"}, "test"),
            ({"RASTRO_ENV": "staging", "NODE_ENV": "development"}, "development"),
            ({"NODE_ENV": " production "}, "production"),
        ],
    )
    def test_detect_environment(self, environ: dict[str, str], expected: str) -> None:
        """RASTRO_ENV wins over NODE_ENV; unknown values are ignored."""
        assert detect_environment(environ) == expected

    def test_detect_from_process(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without a mapping the process environment is read."""
        monkeypatch.delenv("RASTRO_ENV", raising=False)
        monkeypatch.setenv("NODE_ENV", "development")
        assert detect_environment() == "development"

    def test_production_defaults(self) -> None:
        """Production logs warnings and up, without stack traces or paths."""
        config = RastroConfig.defaults("production")
        assert config.level is LogLevel.WARN
        assert config.include_stack_trace is False
        assert config.should_include_source_path is False
        assert config.is_production

    def test_development_defaults(self) -> None:
        """Development logs everything with source paths."""
        config = RastroConfig.defaults("development")
        assert config.level is LogLevel.TRACE
        assert config.include_stack_trace is True
        assert config.should_include_source_path is True
        assert config.is_development

    def test_test_defaults(self) -> None:
        """Test logs everything but only attributes when asked."""
        config = RastroConfig.defaults("test")
        assert config.level is LogLevel.TRACE
        assert config.should_include_source_path is False

    @pytest.mark.parametrize(("mode", "expected"), [(True, True), (False, False)])
    def test_explicit_source_path(self, mode: bool, expected: bool) -> None:
        """An explicit setting overrides the environment."""
        config = RastroConfig(environment="development", include_source_path=mode)
        assert config.should_include_source_path is expected


class TestLevels:
    """LogLevel parsing and gating."""

    def test_order(self) -> None:
        """Levels are ordered from TRACE to SILENT."""
        severities = [level.severity for level in LogLevel]
        assert severities == sorted(severities)
        assert LogLevel.TRACE.severity < LogLevel.ERROR.severity < LogLevel.SILENT.severity

    @pytest.mark.parametrize("value", ["warn", "WARN", "Warn", LogLevel.WARN])
    def test_parse(self, value: str | LogLevel) -> None:
        """Names and members parse to the member."""
        assert LogLevel.parse(value) is LogLevel.WARN

    def test_parse_unknown(self) -> None:
        """Unknown names raise ConfigError listing the valid ones."""
        with pytest.raises(ConfigError, match="expected one of trace"):
            LogLevel.parse("verbose")

    @pytest.mark.parametrize(
        ("level", "expected"),
        [("trace", False), ("debug", False), ("info", True), ("warn", True), ("error", True)],
    )
    def test_should_log(self, level: str, expected: bool) -> None:
        """Entries below the minimum are gated."""
        assert RastroConfig(level=LogLevel.INFO).should_log(level) is expected

    def test_silent_gates_everything(self) -> None:
        """silent=True suppresses every level."""
        config = RastroConfig(level=LogLevel.TRACE, silent=True)
        assert not any(config.should_log(level) for level in LogLevel)

    def test_silent_level_never_logs(self) -> None:
        """An entry at SILENT is never emitted."""
        assert not RastroConfig(level=LogLevel.TRACE).should_log(LogLevel.SILENT)


class TestFromDict:
    """RastroConfig.from_dict()."""

    def test_unknown_keys_ignored(self) -> None:
        """Unknown keys are dropped, known ones applied."""
        config = RastroConfig.from_dict({"level": "debug", "unknown_key": "ignored"})
        assert config.level is LogLevel.DEBUG

    def test_invalid_value_raises(self) -> None:
        """Known keys are still validated."""
        with pytest.raises(ConfigError):
            RastroConfig.from_dict({"environment": "staging"})


class TestConfigStore:
    """Snapshot replacement and subscribers."""

    def make_store(self) -> ConfigStore:
        return ConfigStore(lambda: RastroConfig())

    def test_configure_replaces_snapshot(self) -> None:
        """configure() applies overrides on top of the current snapshot."""
        store = self.make_store()
        store.configure(level="debug")
        config = store.configure(silent=True)
        assert config.level is LogLevel.DEBUG
        assert config.silent is True
        assert store.get() is config

    def test_unknown_option(self) -> None:
        """Unknown option names are rejected."""
        store = self.make_store()
        with pytest.raises(ConfigError, match="bogus"):
            store.configure(bogus=1)

    def test_invalid_value_keeps_snapshot(self) -> None:
        """A rejected value leaves the previous snapshot in place."""
        store = self.make_store()
        before = store.get()
        with pytest.raises(ConfigError):
            store.configure(level="loud")
        assert store.get() is before

    def test_reset(self) -> None:
        """reset() restores the defaults factory's config."""
        store = self.make_store()
        store.configure(level="error")
        assert store.reset() == RastroConfig()

    def test_subscribers_notified(self) -> None:
        """Subscribers see each new snapshot."""
        store = self.make_store()
        seen: list[LogLevel] = []
        store.subscribe(lambda config: seen.append(config.level))
        store.configure(level="info")
        store.reset()
        assert seen == [LogLevel.INFO, LogLevel.WARN]

    def test_unsubscribe(self) -> None:
        """An unsubscribed callback is not called; unsubscribing twice is harmless."""
        store = self.make_store()
        seen: list[RastroConfig] = []
        unsubscribe = store.subscribe(seen.append)
        unsubscribe()
        unsubscribe()
        store.configure(level="info")
        assert seen == []

    def test_subscriber_may_use_store(self) -> None:
        """Subscribers run outside the lock and may call back into the store."""
        store = self.make_store()
        nested: list[RastroConfig] = []

        def subscriber(config: RastroConfig) -> None:
            store.subscribe(nested.append)
            nested.append(store.get())

        store.subscribe(subscriber)
        store.configure(level="info")
        assert nested[0].level is LogLevel.INFO


class TestOverride:
    """Context-local overrides."""

    def test_override_and_restore(self) -> None:
        """The override is active only inside the block."""
        store = ConfigStore(lambda: RastroConfig())
        quiet = RastroConfig(silent=True)
        with store.override(quiet) as active:
            assert active is quiet
            assert store.get() is quiet
        assert store.get().silent is False

    def test_restored_on_exception(self) -> None:
        """An exception inside the block still restores the config."""
        store = ConfigStore(lambda: RastroConfig())
        with pytest.raises(RuntimeError), store.override(RastroConfig(silent=True)):
            raise RuntimeError("boom")
        assert store.get().silent is False

    def test_nested_overrides(self) -> None:
        """Inner overrides win and unwind in order."""
        store = ConfigStore(lambda: RastroConfig())
        outer = RastroConfig(level=LogLevel.INFO)
        inner = RastroConfig(level=LogLevel.ERROR)
        with store.override(outer):
            with store.override(inner):
                assert store.get() is inner
            assert store.get() is outer

    def test_thread_isolation(self) -> None:
        """Other threads keep seeing the store's snapshot."""
        store = ConfigStore(lambda: RastroConfig())
        results: dict[str, bool] = {}

        def worker() -> None:
            results["silent"] = store.get().silent

        with store.override(RastroConfig(silent=True)):
            thread = Thread(target=worker)
            thread.start()
            thread.join()
        assert results == {"silent": False}


class TestModuleHelpers:
    """Module-level functions over the default store."""

    def teardown_method(self) -> None:
        """Reset config after each test."""
        reset_config()

    def test_configure_and_get(self) -> None:
        """configure() changes what get_config() returns."""
        configure(level="error")
        assert get_config().level is LogLevel.ERROR

    def test_reset_config(self) -> None:
        """reset_config() returns to environment defaults."""
        configure(silent=True)
        assert reset_config().silent is False

    @pytest.mark.parametrize("name", sorted(PRESETS))
    def test_apply_preset(self, name: str) -> None:
        """Every preset applies cleanly."""
        config = apply_preset(name)
        for key, value in PRESETS[name].items():
            assert getattr(config, key) == value

    def test_development_preset(self) -> None:
        """The development preset attributes every entry."""
        config = apply_preset("development")
        assert config.should_include_source_path
        assert config.level is LogLevel.TRACE

    def test_unknown_preset(self) -> None:
        """Unknown presets raise ConfigError."""
        with pytest.raises(ConfigError) as exc_info:
            apply_preset("loud")
        assert exc_info.value.field == "preset"

    def test_config_context(self) -> None:
        """config_context() overrides the active config temporarily."""
        before = get_config()
        with config_context(RastroConfig(level=LogLevel.ERROR)):
            assert get_config().level is LogLevel.ERROR
        assert get_config() is before
