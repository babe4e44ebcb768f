import pytest

from jumpkit.core.models import Configuration, CredentialRule, EnvironmentRule


class FakePaginator:
    def __init__(self, pages):
        self.pages = pages
        self.calls = []

    def paginate(self, **kwargs):
        self.calls.append(kwargs)
        return iter(self.pages)


class FakeClient:
    def __init__(self, pages):
        self.paginators = {}
        self.pages = pages

    def get_paginator(self, name):
        return self.paginators.setdefault(name, FakePaginator(self.pages))


class FakeSession:
    """Stands in for boto3.session.Session; ``pages`` maps region -> list of pages or an exception."""

    def __init__(self, pages, clients):
        self.pages = pages
        self.clients = clients

    def client(self, service, region_name=None, config=None):
        pages = self.pages[region_name]
        if isinstance(pages, Exception):
            raise pages
        client = FakeClient(pages)
        self.clients[(service, region_name)] = client
        return client


@pytest.fixture
def session_factory():
    def make(pages):
        clients = {}

        def factory():
            return FakeSession(pages, clients)

        factory.clients = clients
        return factory
    return make


@pytest.fixture
def config():
    return Configuration(
        regions=("us-east-1", "us-west-2"),
        environments=(
            EnvironmentRule(prefix="staging", jump_host="jump.staging.example.com", region="us-west-2"),
            EnvironmentRule(prefix="prod", jump_host="jump.prod.example.com", region="us-east-1"),
            EnvironmentRule(prefix="", jump_host="jump.example.com", region="us-east-1"),
        ),
        credentials=(
            CredentialRule(prefix="staging", user="app", password="s3cret"),
            CredentialRule(prefix="prod", database="main", user="reader", password="pw"),
        ),
        ssh_connect_timeout=7,
        tunnel_timeout=2.0,
    )
