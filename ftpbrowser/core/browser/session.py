from __future__ import annotations

from dataclasses import dataclass, field

from core.listing import remote_paths


@dataclass(slots=True)
class BrowserSession:
    current_path: str = "/"
    history: list[str] = field(default_factory=list)
    connected: bool = False

    def visit(self, path: str, remember: bool = True) -> str:
        target = remote_paths.normalize(path, directory=True)
        if remember and target != self.current_path:
            self.history.append(self.current_path)
        self.current_path = target
        return target

    def child_path(self, name: str) -> str:
        return remote_paths.join(self.current_path, name, directory=True)

    def up_target(self) -> str:
        return remote_paths.parent_of(self.current_path)

    def back_target(self) -> str | None:
        if self.history:
            return self.history[-1]
        parent = self.up_target()
        if parent == self.current_path:
            return None
        return parent

    def go_back(self) -> str | None:
        """Pop one history step (or climb to the parent) without recording it."""
        if self.history:
            target = self.history.pop()
        else:
            target = self.up_target()
            if target == self.current_path:
                return None
        self.current_path = target
        return target

    def set_connected(self, connected: bool) -> None:
        self.connected = connected
        if not connected:
            self.reset()

    def reset(self) -> None:
        self.current_path = "/"
        self.history.clear()

    @property
    def at_root(self) -> bool:
        return self.current_path == "/"
