from dataclasses import dataclass, field

from pika.adapters.blocking_connection import BlockingChannel


@dataclass
class Delivery:
    """One broker-handed occurrence of a message, settled exactly once."""

    body: bytes
    delivery_tag: int
    channel: BlockingChannel
    redelivered: bool = False
    _settled: bool = field(default=False, init=False, repr=False)

    @property
    def settled(self) -> bool:
        return self._settled

    def ack(self) -> None:
        self._mark_settled()
        self.channel.basic_ack(delivery_tag=self.delivery_tag)

    def nack(self, requeue: bool = False) -> None:
        self._mark_settled()
        self.channel.basic_nack(delivery_tag=self.delivery_tag, requeue=requeue)

    def _mark_settled(self) -> None:
        if self._settled:
            raise RuntimeError(f"Delivery {self.delivery_tag} already settled")
        self._settled = True
