from pavilion.scene_config.models import ResourceDescriptor, ResourceType
from pavilion.walrus.urls import get_walrus_url, resolve_resource_url


def test_get_walrus_url_strips_prefix_and_quotes():
    assert get_walrus_url("0xabc", "https://agg.example/") == "https://agg.example/v1/blobs/abc"
    assert get_walrus_url("a/b+c", "https://agg.example") == "https://agg.example/v1/blobs/a%2Fb%2Bc"


def test_get_walrus_url_uses_configured_aggregator(monkeypatch):
    monkeypatch.setenv("WALRUS_AGGREGATOR_URL", "https://walrus.local")
    assert get_walrus_url("blob") == "https://walrus.local/v1/blobs/blob"


def test_resolve_resource_url():
    walrus = ResourceDescriptor(type=ResourceType.WALRUS, blobId="b1")
    direct = ResourceDescriptor(type=ResourceType.DIRECT, modelUrl="https://m/x.glb")
    image = ResourceDescriptor(type=ResourceType.IMAGE, modelUrl="https://i/x.png")
    geometry = ResourceDescriptor(type=ResourceType.GEOMETRY, color=5)
    assert resolve_resource_url(walrus, "https://agg") == "https://agg/v1/blobs/b1"
    assert resolve_resource_url(direct) == "https://m/x.glb"
    assert resolve_resource_url(image) == "https://i/x.png"
    assert resolve_resource_url(geometry) is None
