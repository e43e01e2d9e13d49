"""
Pytest configuration and shared fakes.

Registers the integration marker and provides an in-memory stand-in for the
Document Intelligence client so unit tests never touch the network.
"""

import copy

import pytest
from azure.core.exceptions import HttpResponseError
from loguru import logger


def pytest_addoption(parser):
    """Add custom command-line options"""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests against real Azure resources"
    )


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test requiring real Azure resources"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is specified"""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="need --run-integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture(autouse=True)
def reset_loguru():
    """Handlers added during a test would outlive pytest's captured streams"""
    yield
    logger.remove()


def http_error(status_code, message="boom"):
    error = HttpResponseError(message=message)
    error.status_code = status_code
    return error


class FakePoller:
    """Completed LROPoller stand-in: returns `result` or raises `error`."""

    def __init__(self, result=None, error=None, token="operation-token", done=True):
        self._result = result
        self._error = error
        self._token = token
        self._done = done
        self.waits = []

    def continuation_token(self):
        return self._token

    def done(self):
        return self._done

    def wait(self, timeout=None):
        self.waits.append(timeout)
        if self._done and self._error is not None:
            raise self._error

    def result(self, timeout=None):
        if self._error is not None:
            raise self._error
        return self._result


class FakeDocumentClient:
    """
    Replays `outcomes` for successive begin_analyze_document calls.
    An exception outcome is raised at submission; a FakePoller is returned.
    """

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []
        self.closed = False

    def begin_analyze_document(self, model_id, body=None, **kwargs):
        self.calls.append({"model_id": model_id, "body": body, **kwargs})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self):
        self.closed = True


SAMPLE_PAYLOAD = {
    "apiVersion": "2024-11-30",
    "modelId": "prebuilt-invoice",
    "content": "CONTOSO LTD.\nINVOICE\nINV-100\nTotal $110.00",
    "pages": [
        {"pageNumber": 1, "width": 8.5, "height": 11, "unit": "inch", "angle": 0},
    ],
    "keyValuePairs": [
        {"key": {"content": "Invoice #"}, "value": {"content": "INV-100"}, "confidence": 0.9},
        {"key": {"content": "PO Number"}, "confidence": 0.4},
    ],
    "documents": [
        {
            "docType": "invoice",
            "confidence": 0.98,
            "fields": {
                "VendorName": {
                    "type": "string",
                    "valueString": "CONTOSO LTD.",
                    "content": "CONTOSO LTD.",
                    "confidence": 0.93,
                    "boundingRegions": [{"pageNumber": 1, "polygon": [0.5, 0.8, 2.1, 0.8]}],
                    "spans": [{"offset": 0, "length": 12}],
                },
                "InvoiceId": {"type": "string", "valueString": "INV-100", "content": "INV-100", "confidence": 0.97},
                "InvoiceDate": {"type": "date", "valueDate": "2019-11-15", "content": "11/15/2019", "confidence": 0.97},
                "InvoiceTotal": {
                    "type": "currency",
                    "valueCurrency": {"amount": 110.0, "currencySymbol": "$", "currencyCode": "USD", "displayName": "US Dollar"},
                    "content": "$110.00",
                    "confidence": 0.96,
                },
                "CustomerName": {"type": "string", "valueString": "MICROSOFT CORPORATION", "content": "MICROSOFT CORPORATION"},
                "PurchaseOrder": None,
                "Items": {
                    "type": "array",
                    "valueArray": [
                        {
                            "type": "object",
                            "valueObject": {
                                "Description": {"type": "string", "valueString": "Consulting Services", "content": "Consulting Services"},
                                "Amount": {
                                    "type": "currency",
                                    "valueCurrency": {"amount": 60.0, "currencySymbol": "$"},
                                    "content": "$60.00",
                                },
                                "ProductCode": None,
                            },
                        },
                        {
                            "type": "object",
                            "valueObject": {
                                "Description": {"type": "string", "valueString": "Document Fee", "content": "Document Fee"},
                                "Amount": {
                                    "type": "currency",
                                    "valueCurrency": {"amount": 50.0, "currencySymbol": "$"},
                                    "content": "$50.00",
                                },
                            },
                        },
                    ],
                },
            },
        }
    ],
}


@pytest.fixture
def sample_payload():
    return copy.deepcopy(SAMPLE_PAYLOAD)


@pytest.fixture
def invoice_file(tmp_path):
    path = tmp_path / "invoice.pdf"
    path.write_bytes(b"%PDF-1.4 sample invoice")
    return path
