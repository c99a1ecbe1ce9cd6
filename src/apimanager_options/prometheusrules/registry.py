"""Registry of PrometheusRule factories.

The registry is built once by the entry point, frozen, and then passed
to whatever needs to iterate or look up factories.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator

from apimanager_options.component.monitoring import PrometheusRuleBundle


class PrometheusRuleFactory(ABC):
    """Builds the static alerting rules of one subsystem.

    Factories never consult a secret store. They build synthetic options
    that only need to pass structural validation.
    """

    @property
    @abstractmethod
    def type(self) -> str:
        """Name the factory is registered under."""

    @abstractmethod
    def prometheus_rule(self) -> PrometheusRuleBundle:
        """Build the rule bundle.

        Raises:
            RuleFactoryError: If the synthetic options are invalid.

        """


FactoryConstructor = Callable[[], PrometheusRuleFactory]


class RuleFactoryRegistry:
    """An append-only, freezable collection of rule factories.

    Registration is not thread safe. Register everything, call freeze(),
    and only then share the registry.
    """

    def __init__(self) -> None:
        self._factories: dict[str, PrometheusRuleFactory] = {}
        self._frozen = False

    def register(self, constructor: FactoryConstructor) -> PrometheusRuleFactory:
        """Construct a factory and add it to the registry.

        Args:
            constructor: Zero-argument callable returning the factory.

        Returns:
            The registered factory.

        Raises:
            RuntimeError: If the registry is frozen.
            ValueError: If a factory with the same type is registered.

        """
        if self._frozen:
            raise RuntimeError("Cannot register a rule factory after the registry has been frozen")
        factory = constructor()
        if factory.type in self._factories:
            raise ValueError(f"A rule factory of type '{factory.type}' is already registered")
        self._factories[factory.type] = factory
        return factory

    def freeze(self) -> "RuleFactoryRegistry":
        """Reject any further registration.

        Returns:
            The registry itself, so building and freezing can be chained.

        """
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def types(self) -> list[str]:
        """Return the registered types in registration order."""
        return list(self._factories)

    def get(self, factory_type: str) -> PrometheusRuleFactory:
        """Look up a factory by type.

        Raises:
            KeyError: If no factory has that type.

        """
        try:
            return self._factories[factory_type]
        except KeyError:
            raise KeyError(
                f"Unknown rule factory '{factory_type}'. Available: {', '.join(self._factories)}"
            ) from None

    def __iter__(self) -> Iterator[PrometheusRuleFactory]:
        return iter(self._factories.values())

    def __len__(self) -> int:
        return len(self._factories)

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"RuleFactoryRegistry(types={self.types()!r}, frozen={self._frozen!r})"
