"""
Registry of default processes.

Libraries built on procmod register a fallback process for the variables they
know about, grouped under a namespace of their choosing (a string, a module,
a type...). :func:`procmod.completion.complete` falls back to these processes
for variables that are referenced but not given a process.

Example::

    registry = DefaultRegistry()
    registry.register("climate", ParameterProcess(albedo), TimeDerivative(T, forcing))
    eqs = complete([heat_balance], "climate", registry=registry)
"""

import threading
import warnings
from collections.abc import Hashable
from typing import Any

from procmod.errors import DefaultOverwriteWarning
from procmod.process import lhs_variable, to_equation
from procmod.symbolic import Equation, variable_name

__all__ = ["DefaultRegistry"]


class DefaultRegistry:
    """
    Default processes grouped by namespace.

    Each namespace maps a variable to its default process. Maps are created on
    first access and live as long as the registry. ``register`` and
    ``lookup`` hold a lock; iterating a map returned by ``lookup`` while
    another thread registers into it is the caller's responsibility.
    """

    def __init__(self) -> None:
        self._processes: dict = {}
        self._lock = threading.RLock()

    def lookup(self, namespace: Hashable) -> dict:
        """
        Return the live ``variable -> process`` map of ``namespace``.

        Repeated calls return the same dict, so later registrations are
        visible through earlier results.
        """
        with self._lock:
            if namespace not in self._processes:
                self._processes[namespace] = {}
            return self._processes[namespace]

    def register(self, namespace: Hashable, *processes: Any, warn: bool = True) -> None:
        """
        Register processes (or equations) as defaults for their lhs variables.

        An existing default for the same variable is overwritten, with a
        :class:`~procmod.errors.DefaultOverwriteWarning` if ``warn``.
        """
        with self._lock:
            mdict = self.lookup(namespace)
            for process in processes:
                key = lhs_variable(process)
                # Same variable under another default value is still the same variable
                existing = [k for k in mdict if variable_name(k) == variable_name(key)]
                if existing and warn:
                    warnings.warn(
                        f"Overwriting default process for variable {key} in namespace {namespace!r}",
                        DefaultOverwriteWarning,
                        stacklevel=2,
                    )
                for k in existing:
                    del mdict[k]
                mdict[key] = process

    def equations(self, namespace: Hashable) -> list[Equation]:
        """The default processes of ``namespace`` as equations, in registration order."""
        return [to_equation(proc) for proc in self.lookup(namespace).values()]

    def namespaces(self) -> list:
        """Namespaces that have been looked up or registered into."""
        with self._lock:
            return list(self._processes)

    def __contains__(self, namespace: Hashable) -> bool:
        return namespace in self._processes

    def __repr__(self) -> str:
        counts = ", ".join(f"{ns!r}: {len(procs)}" for ns, procs in self._processes.items())
        return f"DefaultRegistry({{{counts}}})"
