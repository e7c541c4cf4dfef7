"""
Tests for plugin_manager.plugins.manager module.
"""

from pathlib import Path

import pytest

from plugin_manager.core.config import PluginManagerConfig
from plugin_manager.core.errors import GroupNotFoundError, PluginNotFoundError
from plugin_manager.plugins.arguments import PluginType
from plugin_manager.plugins.base import Plugin
from plugin_manager.plugins.manager import (
    PluginManager,
    get_plugin_manager,
    set_plugin_manager,
)
from plugin_manager import plugin_argument


class TestErrors:
    """Tests for registry errors."""

    def test_group_not_found(self) -> None:
        err = GroupNotFoundError("nogroup")
        assert err.group == "nogroup"
        assert "nogroup" in str(err)
        assert isinstance(err, LookupError)

    def test_plugin_not_found(self) -> None:
        err = PluginNotFoundError("Missing")
        assert err.plugin_name == "Missing"
        assert str(err) == "plugin not found: Missing"
        assert isinstance(err, KeyError)


class TestRegistry:
    """Tests for registration and lookup."""

    def test_register_and_lookup(self, manager: PluginManager) -> None:
        class Sample(Plugin, manager=manager):
            pass

        assert "Sample" in manager
        assert len(manager) == 1
        assert list(manager) == ["Sample"]
        assert manager.get("Sample") is Sample
        assert manager["Sample"] is Sample
        assert manager.plugin_type("Sample") is Sample.plugin_type
        assert manager.instance("Sample") is None
        assert "Sample" in repr(manager)

    def test_unknown_plugin(self, manager: PluginManager) -> None:
        assert manager.get("Nope") is None
        assert manager.plugin_type("Nope") is None
        assert "Nope" not in manager
        with pytest.raises(PluginNotFoundError):
            manager["Nope"]

    def test_register_replaces(self, manager: PluginManager) -> None:
        first = PluginType(name="Same")
        second = PluginType(name="Same")
        manager.register(first)
        manager.register(second)

        assert manager.plugin_types() == [second]

    def test_scope(self) -> None:
        manager = PluginManager(scope="acme")

        class Mailer(Plugin, manager=manager, name="acme.Mailer"):
            pass

        assert manager.get("Mailer") is Mailer
        assert "Mailer" in manager
        assert manager.get("acme.Mailer") is None
        assert manager.scoped_name("Mailer") == "acme.Mailer"
        assert manager.unscoped_name("acme.Mailer") == "Mailer"
        assert manager.unscoped_name("other.Mailer") == "other.Mailer"

    def test_scope_from_config(self) -> None:
        manager = PluginManager(config=PluginManagerConfig(scope="acme."))
        assert manager.scope == "acme"

    def test_default_manager(self, default_manager: PluginManager) -> None:
        assert get_plugin_manager() is default_manager

        replacement = PluginManager()
        previous = set_plugin_manager(replacement)
        try:
            assert previous is default_manager
            assert get_plugin_manager() is replacement
        finally:
            set_plugin_manager(previous)

    def test_default_manager_created_lazily(self) -> None:
        previous = set_plugin_manager(None)
        try:
            created = get_plugin_manager()
            assert isinstance(created, PluginManager)
            assert get_plugin_manager() is created
        finally:
            set_plugin_manager(previous)


class TestGroups:
    """Tests for grouped iteration."""

    @pytest.fixture
    def populated(self, manager: PluginManager) -> PluginManager:
        class TestPlugin(Plugin, manager=manager, groups=["mytestgroup", "mytestgroup2"]):
            pass

        class Other(Plugin, manager=manager, groups=["mytestgroup"]):
            pass

        class DisabledPlugin(Plugin, manager=manager, groups=["mytestgroup"]):
            pass

        DisabledPlugin.plugin_setting("disabled", True)
        return manager

    def test_group_members(self, populated: PluginManager) -> None:
        names = [plugin.plugin_type.name for plugin, _ in populated.each(group="mytestgroup")]
        assert names == ["TestPlugin", "Other"]

    def test_second_group(self, populated: PluginManager) -> None:
        names = [plugin.plugin_type.name for plugin, _ in populated.each(group="mytestgroup2")]
        assert names == ["TestPlugin"]

    def test_all_plugins_skip_disabled(self, populated: PluginManager) -> None:
        names = [plugin.plugin_type.name for plugin, _ in populated.each()]
        assert names == ["TestPlugin", "Other"]

    def test_unknown_group(self, populated: PluginManager) -> None:
        with pytest.raises(GroupNotFoundError) as exc_info:
            populated.each(group="nogroup")
        assert exc_info.value.group == "nogroup"

    def test_groups_listed(self, populated: PluginManager) -> None:
        assert populated.groups() == ["mytestgroup", "mytestgroup2"]

    def test_group_created_on_first_use(self, manager: PluginManager) -> None:
        class Late(Plugin, manager=manager):
            pass

        with pytest.raises(GroupNotFoundError):
            manager.each(group="late")

        Late.plugin_group("late")

        assert [plugin for plugin, _ in manager.each(group="late")] == [Late]

    def test_each_yields_instances(self, manager: PluginManager) -> None:
        class Auto(Plugin, manager=manager):
            pass

        manager.initialize_plugins()

        [(plugin, instance)] = list(manager.each())
        assert plugin is Auto
        assert isinstance(instance, Auto)


class TestInitializePlugins:
    """Tests for bulk initialization."""

    def test_missing_argument_not_initialized(self, manager: PluginManager) -> None:
        class PluginInitialize(Plugin, manager=manager):
            argument1 = plugin_argument()

        created = manager.initialize_plugins({}, {})

        assert created == {}
        assert manager.instance("PluginInitialize") is None

    def test_initialized_with_options_and_defaults(self, manager: PluginManager) -> None:
        class PluginInitialize(Plugin, manager=manager):
            argument1 = plugin_argument()
            argument3 = plugin_argument(optional=True)
            argument4 = plugin_argument()

            def after_initialize(self) -> None:
                self.argument1 = self.argument1 * 3

        manager.initialize_plugins(
            {"PluginInitialize": {"argument1": "asdf"}},
            defaults={"argument4": "1234"},
        )

        plugin = manager.instance("PluginInitialize")
        assert plugin is not None
        assert plugin.argument1 == "asdfasdfasdf"
        assert plugin.argument4 == "1234"
        assert plugin.argument3 is None

    def test_plugin_options_override_defaults(self, manager: PluginManager) -> None:
        class Merged(Plugin, manager=manager):
            host = plugin_argument()

        manager.initialize_plugins({"Merged": {"host": "plugin"}}, defaults={"host": "default"})

        assert manager.instance("Merged").host == "plugin"

    def test_non_mapping_options_use_defaults(self, manager: PluginManager) -> None:
        class Fallback(Plugin, manager=manager):
            host = plugin_argument()

        manager.initialize_plugins({"Fallback": ["host"]}, defaults={"host": "default"})

        assert manager.instance("Fallback").host == "default"

    def test_skip_auto_initialization(self, manager: PluginManager) -> None:
        class PluginNoAutoInitialize(
            Plugin, manager=manager, settings={"skip_auto_initialization": True}
        ):
            argument1 = plugin_argument()

        manager.initialize_plugins({"PluginNoAutoInitialize": {"argument1": "asdf"}})

        assert manager.instance("PluginNoAutoInitialize") is None

    def test_disabled(self, manager: PluginManager) -> None:
        class DisabledPlugin(Plugin, manager=manager, settings={"disabled": True}):
            argument1 = plugin_argument()

        manager.initialize_plugins({"DisabledPlugin": {"argument1": "asdf"}})

        assert manager.instance("DisabledPlugin") is None
        assert list(manager.each()) == []

    def test_failure_does_not_stop_others(self, manager: PluginManager) -> None:
        class Broken(Plugin, manager=manager):
            argument1 = plugin_argument()

        class Rejecting(Plugin, manager=manager):
            def after_initialize(self) -> None:
                raise ValueError("not today")

        class Working(Plugin, manager=manager):
            argument1 = plugin_argument(optional=True, default="ok")

        created = manager.initialize_plugins()

        assert list(created) == ["Working"]
        assert manager.instance("Broken") is None
        assert manager.instance("Rejecting") is None
        assert manager.instance("Working").argument1 == "ok"

    def test_raising_validator_does_not_stop_others(self, manager: PluginManager) -> None:
        class Strict(Plugin, manager=manager):
            host = plugin_argument(validator=lambda v: v.startswith("h"))

        class Other(Plugin, manager=manager):
            argument1 = plugin_argument(optional=True, default="ok")

        created = manager.initialize_plugins({"Strict": {"host": 42}})

        assert list(created) == ["Other"]
        assert manager.instance("Strict") is None
        assert manager.instance("Other").argument1 == "ok"

    def test_rerun_replaces_instance(self, manager: PluginManager) -> None:
        class Counter(Plugin, manager=manager):
            value = plugin_argument(optional=True, default="0")

        manager.initialize_plugins()
        first = manager.instance("Counter")
        manager.initialize_plugins({"Counter": {"value": "1"}})
        second = manager.instance("Counter")

        assert first is not second
        assert second.value == "1"

    def test_failed_rerun_keeps_previous_instance(self, manager: PluginManager) -> None:
        class Needy(Plugin, manager=manager):
            value = plugin_argument()

        manager.initialize_plugins({"Needy": {"value": "1"}})
        manager.initialize_plugins({})

        assert manager.instance("Needy").value == "1"

    def test_reset_instances(self, manager: PluginManager) -> None:
        class Simple(Plugin, manager=manager):
            pass

        manager.initialize_plugins()
        manager.reset_instances()

        assert manager.instance("Simple") is None


class TestLoading:
    """Tests for importing plugin modules."""

    PLUGIN_SOURCE = (
        "from plugin_manager import Plugin, plugin_argument\n"
        "\n"
        "class LoadedPlugin(Plugin):\n"
        "    argument1 = plugin_argument(optional=True, default='loaded')\n"
    )

    def test_load_from_path(self, default_manager: PluginManager, temp_dir: Path) -> None:
        (temp_dir / "loaded.py").write_text(self.PLUGIN_SOURCE)
        (temp_dir / "_private.py").write_text("raise RuntimeError('never imported')\n")

        assert default_manager.load_from_path(temp_dir) == 1
        assert "LoadedPlugin" in default_manager
        # second load of the same path is a no-op
        assert default_manager.load_from_path(temp_dir) == 0

    def test_load_from_path_skips_broken_files(
        self, default_manager: PluginManager, temp_dir: Path
    ) -> None:
        (temp_dir / "broken.py").write_text("raise RuntimeError('broken plugin')\n")
        (temp_dir / "loaded.py").write_text(self.PLUGIN_SOURCE)

        assert default_manager.load_from_path(temp_dir) == 1
        assert "LoadedPlugin" in default_manager

    def test_load_from_missing_path(self, manager: PluginManager, temp_dir: Path) -> None:
        assert manager.load_from_path(temp_dir / "missing") == 0

    def test_load_modules(self, manager: PluginManager) -> None:
        assert manager.load_modules(["json", "plugin_manager_no_such_module"]) == 1
