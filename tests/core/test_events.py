"""Tests for invoicing domain events."""

from dataclasses import FrozenInstanceError

import pytest

from builders import make_invoice
from core.events import (
    InvoiceActivated,
    InvoiceCreated,
    InvoiceReversed,
    InvoiceStatusChanged,
    InvoicingEvent,
)
from core.models import InvoiceStatus


class TestEventFactories:

    def test_created(self):
        invoice = make_invoice()
        event = InvoiceCreated.create(invoice=invoice)

        assert event.invoice is invoice
        assert isinstance(event, InvoicingEvent)

    def test_activated(self):
        invoice = make_invoice(InvoiceStatus.ACTIVE, 1)
        assert InvoiceActivated.create(invoice=invoice).invoice is invoice

    def test_status_changed_keeps_previous(self):
        event = InvoiceStatusChanged.create(
            invoice=make_invoice(InvoiceStatus.PAID, 1),
            previous_status=InvoiceStatus.ACTIVE,
        )
        assert event.previous_status == InvoiceStatus.ACTIVE

    def test_reversed_carries_both_sides(self):
        source = make_invoice(InvoiceStatus.PAID, 1)
        storno = make_invoice(InvoiceStatus.STORNO, 2)

        event = InvoiceReversed.create(source=source, storno=storno, partial=False)

        assert (event.source, event.storno, event.partial) == (source, storno, False)


class TestEventIdentity:

    def test_unique_ids_and_timestamps(self):
        invoice = make_invoice()
        first = InvoiceCreated.create(invoice=invoice)
        second = InvoiceCreated.create(invoice=invoice)

        assert first.event_id != second.event_id
        assert first.occurred_at.tzinfo is not None

    def test_immutable(self):
        event = InvoiceCreated.create(invoice=make_invoice())
        with pytest.raises(FrozenInstanceError):
            event.invoice = None
