"""Shared fixtures."""

import pytest

from bgplab import TopologyContext, generate


class FakeRenderer:
    """Boot config renderer that records the hostnames it was asked for."""

    def __init__(self) -> None:
        self.hostnames: list[str] = []

    def render(self, hostname: str) -> str:
        self.hostnames.append(hostname)
        return f"boot:{hostname}"


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def context() -> TopologyContext:
    return TopologyContext(location="westeurope", prefix="bgplab", alias="jdoe")


@pytest.fixture
def graph(context, renderer):
    return generate(4, "1.2.3.4", context, boot_renderer=renderer)
