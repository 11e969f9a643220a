"""Super Serial Card (6551 ACIA)."""

from __future__ import annotations

from ..models import CardType
from ..yaml_helper import YamlLoadHelper, YamlSaveHelper
from .base import Card

_STATUS_TX_EMPTY = 0x10


class SuperSerialCard(Card):
    SNAPSHOT_NAME = "Super Serial Card"
    SNAPSHOT_VERSION = 1
    CARD_TYPE = CardType.SSC
    ALLOWED_SLOTS = (2,)

    def __init__(self) -> None:
        self.baud_rate = 9600
        self.stop_bits = 1
        self.byte_size = 8
        self.parity = 0
        self.comm_port = 0
        self.reset()

    def reset(self) -> None:
        """Equivalent of an ACIA programmed reset (CommReset)."""

        self.control = 0x1F
        self.command = 0x00
        self.status = _STATUS_TX_EMPTY
        self.tx_irq_enabled = False
        self.rx_irq_enabled = False

    def _save_state(self, writer: YamlSaveHelper) -> None:
        writer.save_uint("Baud Rate", self.baud_rate)
        writer.save_uint("Stop Bits", self.stop_bits)
        writer.save_uint("Byte Size", self.byte_size)
        writer.save_uint("Parity", self.parity)
        writer.save_hex("Control", self.control)
        writer.save_hex("Command", self.command)
        writer.save_hex("Status", self.status)
        writer.save_uint("Comm Port", self.comm_port)
        writer.save_bool("TX IRQ Enabled", self.tx_irq_enabled)
        writer.save_bool("RX IRQ Enabled", self.rx_irq_enabled)

    def _load_state(self, loader: YamlLoadHelper, version: int) -> None:
        _ = version
        self.baud_rate = loader.load_uint("Baud Rate")
        self.stop_bits = loader.load_uint("Stop Bits")
        self.byte_size = loader.load_uint("Byte Size")
        self.parity = loader.load_uint("Parity")
        self.control = loader.load_uint("Control") & 0xFF
        self.command = loader.load_uint("Command") & 0xFF
        self.status = loader.load_uint("Status") & 0xFF
        self.comm_port = loader.load_uint("Comm Port")
        self.tx_irq_enabled = loader.load_bool("TX IRQ Enabled")
        self.rx_irq_enabled = loader.load_bool("RX IRQ Enabled")


__all__ = ["SuperSerialCard"]
