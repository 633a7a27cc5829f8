import unittest

import pytest

from tinyioc import Container, ReflectionError, UnsatisfiableParameterError


class ConfigInterface: ...


class PHPConfig(ConfigInterface): ...


class App:
    label = "app"

    def __init__(self, config: ConfigInterface):
        self.config = config
        self.method_config = None

    def handle(self, config: ConfigInterface):
        self.method_config = config

    def render(self, template: str, config: ConfigInterface, suffix: str = "!") -> str:
        return f"{template}:{type(config).__name__}{suffix}"

    def fail(self):
        msg = "handler failed"
        raise LookupError(msg)

    @staticmethod
    def build(config: ConfigInterface) -> ConfigInterface:
        return config

    @classmethod
    def name(cls, prefix: str = "") -> str:
        return prefix + cls.__name__


class TestMethodInjection(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container.instance()
        self.cont.bind(ConfigInterface, PHPConfig)
        self.app = self.cont.resolve(App)

    def test_resolve_method_injects_like_constructor(self):
        self.cont.resolve_method(self.app, "handle")
        assert type(self.app.method_config) is PHPConfig
        assert type(self.app.config) is PHPConfig

    def test_resolve_method_returns_result(self):
        got = self.cont.resolve_method(self.app, "render", template="home")
        assert got == "home:PHPConfig!"

    def test_resolve_method_accepts_args_mapping(self):
        got = self.cont.resolve_method(self.app, "render", {"template": "home", "suffix": "?"})
        assert got == "home:PHPConfig?"

    def test_resolve_method_returns_none_for_procedures(self):
        assert self.cont.resolve_method(self.app, "handle") is None

    def test_resolve_method_uses_singleton_binding(self):
        config = PHPConfig()
        self.cont.singleton(ConfigInterface, config)
        self.cont.resolve_method(self.app, "handle")
        assert self.app.method_config is config

    def test_resolve_method_override_wins(self):
        config = PHPConfig()
        self.cont.resolve_method(self.app, "handle", config=config)
        assert self.app.method_config is config

    def test_resolve_method_on_static_and_class_methods(self):
        assert type(self.cont.resolve_method(self.app, "build")) is PHPConfig
        assert self.cont.resolve_method(self.app, "name", prefix="my") == "myApp"

    def test_resolve_method_unsatisfiable_parameter_raises(self):
        with pytest.raises(UnsatisfiableParameterError) as ctx:
            self.cont.resolve_method(self.app, "render")
        assert ctx.value.owner == "App.render"
        assert ctx.value.parameter == "template"

    def test_resolve_method_missing_method_raises(self):
        with pytest.raises(ReflectionError, match=r"App.missing\(\) does not exist"):
            self.cont.resolve_method(self.app, "missing")

    def test_resolve_method_ignores_instance_attributes(self):
        self.app.dynamic = lambda: "dynamic"
        with pytest.raises(ReflectionError):
            self.cont.resolve_method(self.app, "dynamic")

    def test_resolve_method_non_callable_attribute_raises(self):
        with pytest.raises(ReflectionError, match="is not a method"):
            self.cont.resolve_method(self.app, "label")

    def test_resolve_method_propagates_errors_unchanged(self):
        with pytest.raises(LookupError, match="handler failed"):
            self.cont.resolve_method(self.app, "fail")
