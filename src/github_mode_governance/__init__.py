"""Policy gates and spec tracking for GitHub Mode CI pipelines."""

__all__: list[str] = []
