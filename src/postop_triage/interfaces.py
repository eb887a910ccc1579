"""Abstract interface for outbound alert channels.

The SDK decides *whether* to alert and *what* to send; it ships no
network code.  Concrete channels (messaging bot, transactional email) live
in ``postop_server.channels`` and are handed to the dispatcher at startup.

Typical integration flow::

    decision = decide(result, patient_id=..., raw_excerpt=..., ...)
    for channel in channels:
        if channel.name in decision.channels:
            await channel.send(decision.payload)
"""

from abc import ABC, abstractmethod

from postop_triage.models.enums import AlertChannelName
from postop_triage.models.triage import AlertPayload


class AlertChannel(ABC):
    """Interface for a single best-effort outbound alert channel.

    Implementations must raise on delivery failure rather than return a
    status; the dispatcher catches, logs, and isolates the failure so it
    never affects other channels or the webhook response.
    """

    #: Which configured channel this implementation serves.
    name: AlertChannelName

    @abstractmethod
    async def send(self, payload: AlertPayload) -> None:
        """Deliver *payload* to the channel's destination.

        Parameters
        ----------
        payload:
            Bounded alert summary produced by
            :func:`postop_triage.alerts.decide`.

        Raises
        ------
        Exception
            Any delivery failure; transport errors are expected to be
            wrapped in a channel-specific error by the implementation.
        """
        ...
