"""Render recipients the way they appear in outgoing address fields."""

from typing import Optional, Sequence, Tuple, Union

Recipient = Tuple[Optional[str], str]


def render_recipient(recipient: Union[str, Recipient, Sequence[Union[str, Recipient]]]) -> str:
    """
    Render one recipient or a list of them.

    - ``("Name", "addr")`` renders as ``Name <addr>``.
    - A blank or missing name renders the bare address.
    - Lists are rendered entry by entry and joined with ", ", keeping order.
    """
    if isinstance(recipient, str):
        return recipient
    if isinstance(recipient, tuple):
        name, address = recipient
        if name:
            return f"{name} <{address}>"
        return address
    return ", ".join(render_recipient(r) for r in recipient)
