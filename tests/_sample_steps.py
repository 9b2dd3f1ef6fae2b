"""Step classes used by the runtime provider and loader tests."""

from typing import Annotated, Optional

from jenkinsfn.core.api import argument, step


class Target:
    pass


class Base:
    base_arg: str = argument(description="from the base")
    base_plain: int = 0


class Mid(Base):
    mid_arg: Target = argument()


@step
class LeafStep(Mid):
    leaf_arg: Annotated[int, argument(name="count")]
    untouched: str = "x"

    def run(self):
        return (self.leaf_arg, self.mid_arg, self.base_arg)


@step(name="greet")
class GreetStep:
    name: str = "ignored"
    target: str = argument(name="who", description="target to greet")

    def run(self):
        return f"hello {self.target}"


@step()
class HelloStep:
    greeting: str = argument(description="greeting word", default="hello")
    target: Optional[str] = argument()

    def __call__(self):
        return f"{self.greeting} {self.target}"


@step()
class URLStep:
    url = argument()
    timeout: "NotDefinedAnywhere" = argument()


class NotAStep:
    value: str = argument()
