"""Staged fan-out/fan-in over backend calls.

A pipeline is a list of named steps. Each step names the steps whose results
it needs; those must be declared before it. Steps with the same dependency
depth form a stage and run concurrently. A stage only starts once every step
of the previous stage has succeeded, so a missing primary entity stops the
whole call before any dependent request goes out.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

Fetch = Callable[[Mapping[str, Any]], Awaitable[Any]]


@dataclass(frozen=True)
class Step:
    name: str
    fetch: Fetch
    after: tuple[str, ...] = ()


class FetchPipeline:
    def __init__(self, steps: Iterable[Step]) -> None:
        self._steps: dict[str, Step] = {}
        depth: dict[str, int] = {}
        for step in steps:
            if step.name in self._steps:
                raise ValueError(f"Duplicate step: {step.name}")
            missing = [dep for dep in step.after if dep not in self._steps]
            if missing:
                raise ValueError(f"Step {step.name} depends on undeclared steps: {', '.join(missing)}")
            self._steps[step.name] = step
            depth[step.name] = 1 + max((depth[dep] for dep in step.after), default=-1)

        stages: list[list[str]] = [[] for _ in range(max(depth.values(), default=-1) + 1)]
        for name in self._steps:
            stages[depth[name]].append(name)
        self._stages = stages

    @property
    def stages(self) -> list[list[str]]:
        return [list(stage) for stage in self._stages]

    async def run(self, seed: Mapping[str, Any] | None = None) -> dict[str, Any]:
        results: dict[str, Any] = dict(seed or {})
        for stage in self._stages:
            outcomes = await asyncio.gather(
                *(self._steps[name].fetch(results) for name in stage),
                return_exceptions=True,
            )
            for name, outcome in zip(stage, outcomes):
                if isinstance(outcome, BaseException):
                    raise outcome
                results[name] = outcome
        return results
