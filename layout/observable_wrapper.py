from collections import defaultdict
from typing import Any, Callable, Iterable, Optional

Callback = Callable[[str, Any, Any], None]

class ObservableWrapper:
    """Attribute proxy that notifies subscribers when a wrapped field changes.

    Subscribers are grouped by owner so a page can drop all of its callbacks
    at once when its client disconnects.
    """

    def __init__(self, target: Any):
        object.__setattr__(self, "_target", target)
        # field -> owner -> token -> callback
        object.__setattr__(self, "_subs", defaultdict(lambda: defaultdict(dict)))

    @property
    def target(self) -> Any:
        return self._target

    def __getattr__(self, name: str) -> Any:
        return getattr(self._target, name)

    def __setattr__(self, name: str, value: Any) -> None:
        if not hasattr(self._target, name):
            raise AttributeError(f"{type(self._target).__name__} has no field {name!r}")
        old = getattr(self._target, name)
        setattr(self._target, name, value)
        if old == value:
            return
        self._notify(name, old, value)

    def _notify(self, name: str, old: Any, value: Any) -> None:
        for owner_map in list(self._subs.get(name, {}).values()):
            for cb in list(owner_map.values()):
                cb(name, old, value)

    def update(self, values: dict[str, Any]) -> None:
        """Assign several fields; each changed field notifies on its own."""
        for name, value in values.items():
            setattr(self, name, value)

    def subscribe(self, fields: str | Iterable[str], callback: Callback, *, owner: Optional[str] = None) -> Callable[[], None]:
        """Subscribe to one or more fields. Returns an unsubscribe() handle."""
        if isinstance(fields, str):
            fields = {fields}
        fields = set(fields)
        owner = owner or "__default__"
        token = object()

        for f in fields:
            self._subs[f][owner][token] = callback

        def unsubscribe():
            for f in fields:
                self._subs.get(f, {}).get(owner, {}).pop(token, None)

        return unsubscribe

    def unsubscribe_owner(self, owner: str) -> None:
        """Remove all subscriptions registered under this owner."""
        for field in list(self._subs.keys()):
            self._subs[field].pop(owner, None)
            if not self._subs[field]:
                self._subs.pop(field, None)
