"""Dependency ordering for service readiness sequencing."""

from __future__ import annotations

from collections.abc import Sequence

from .errors import ConfigurationError
from .models import ServiceSpec


def domain_order_service_specs(specs: Sequence[ServiceSpec]) -> list[ServiceSpec]:
    """Return specs in a dependency-respecting total order.

    Services are released in declaration order whenever more than one is
    ready, so an already consistent list keeps its order unchanged.

    Args:
        specs: Declared service specs.

    Returns:
        list[ServiceSpec]: Specs ordered so every dependency precedes its dependents.

    Raises:
        ConfigurationError: Raised for empty input, duplicate names, unknown
            or self dependencies, and dependency cycles.
    """

    if not specs:
        raise ConfigurationError("service list must not be empty")

    specs_by_name: dict[str, ServiceSpec] = {}
    for spec in specs:
        if spec.name in specs_by_name:
            raise ConfigurationError(f"duplicate service name: {spec.name}")
        specs_by_name[spec.name] = spec

    for spec in specs:
        for dependency_name in spec.depends_on:
            if dependency_name == spec.name:
                raise ConfigurationError(f"service {spec.name} depends on itself")
            if dependency_name not in specs_by_name:
                raise ConfigurationError(f"service {spec.name} depends on unknown service {dependency_name}")

    ordered_specs: list[ServiceSpec] = []
    released_names: set[str] = set()
    remaining_specs = list(specs)

    while remaining_specs:
        ready_spec = next(
            (spec for spec in remaining_specs if all(name in released_names for name in spec.depends_on)),
            None,
        )
        if ready_spec is None:
            blocked_names = ", ".join(spec.name for spec in remaining_specs)
            raise ConfigurationError(f"dependency cycle detected among services: {blocked_names}")
        ordered_specs.append(ready_spec)
        released_names.add(ready_spec.name)
        remaining_specs.remove(ready_spec)

    return ordered_specs
