from tag_registry import __version__


def test_health_and_version(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json().get("status") == "ok"

    v = client.get("/version")
    assert v.status_code == 200
    assert v.json() == {"app": "tag-registry", "version": __version__}


def test_write_then_read_roundtrip(client):
    res = client.post("/api/nginx:1.25")
    assert res.status_code == 200
    items = client.get("/api/nginx", params={"limit": 1}).json()
    assert items[0]["name"] == "nginx"
    assert items[0]["tag"] == "1.25"


def test_uvicorn_entry_module_builds_app(monkeypatch, tmp_path):
    import importlib
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TAG_REGISTRY_PREFIX", "/registry/")
    import tag_registry.main as entry
    entry = importlib.reload(entry)
    assert entry.app.state.settings.prefix == "registry"
