#!/usr/bin/env python3

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient
from PIL import Image

from apps.api.spritepack_api.main import app
from apps.api.spritepack_api.services.sprite_service import reset_pipeline_cache_for_tests as reset_pipeline
from apps.api.spritepack_api.storage.catalog import reset_backend_cache_for_tests as reset_catalog_backend


def _write_png(path: Path, width: int, height: int) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", (width, height), (255, 0, 0, 255)).save(path, format="PNG")


class SpritesApiTests(unittest.TestCase):
    _env_keys = (
        "SPRITEPACK_IMAGE_ROOT",
        "SPRITEPACK_DATA_DIR",
        "SPRITEPACK_SHEET_URL",
        "SPRITEPACK_MAX_SHEET_PIXELS",
    )

    def setUp(self) -> None:
        self._env_backup = {k: os.environ.get(k) for k in self._env_keys}
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        self.image_root = root / "images"
        self.image_root.mkdir()
        os.environ["SPRITEPACK_IMAGE_ROOT"] = str(self.image_root)
        os.environ["SPRITEPACK_DATA_DIR"] = str(root / "data")
        os.environ["SPRITEPACK_SHEET_URL"] = "/api/v1/sprites/sheets/"
        os.environ.pop("SPRITEPACK_MAX_SHEET_PIXELS", None)
        reset_catalog_backend()
        reset_pipeline()
        self.client = TestClient(app)

    def tearDown(self) -> None:
        for key, value in self._env_backup.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        reset_catalog_backend()
        reset_pipeline()
        self._tmp.cleanup()

    def test_healthz_after_startup(self) -> None:
        with TestClient(app) as client:
            resp = client.get("/healthz")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json().get("status"), "ok")

    def test_element_created_then_cached(self) -> None:
        _write_png(self.image_root / "icons/home.png", 100, 50)

        first = self.client.post("/api/v1/sprites/element", json={"source": "icons/home.png"})
        self.assertEqual(first.status_code, 200)
        p1 = first.json()
        self.assertTrue(p1["created"])
        self.assertIn('style="display:inline-block;', p1["html"])
        self.assertEqual(p1["placement"]["x"], 0)
        self.assertEqual(p1["placement"]["width"], 100)

        second = self.client.post("/api/v1/sprites/element", json={"source": "icons/home.png"})
        p2 = second.json()
        self.assertFalse(p2["created"])
        self.assertEqual(p2["html"], f'<span class="{p2["class_name"]}"></span>')
        self.assertEqual(p1["placement"], p2["placement"])

    def test_input_element(self) -> None:
        _write_png(self.image_root / "go.png", 20, 20)

        resp = self.client.post(
            "/api/v1/sprites/element",
            json={"source": "go.png", "tag": "input", "attributes": {"name": "go"}},
        )

        self.assertEqual(resp.status_code, 200)
        html = resp.json()["html"]
        self.assertTrue(html.startswith("<input "))
        self.assertIn('type="submit"', html)
        self.assertIn('name="go"', html)

    def test_missing_image_is_404_and_not_tracked(self) -> None:
        resp = self.client.post("/api/v1/sprites/element", json={"source": "nope.png"})

        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error_code"], "source_unreadable")
        self.assertEqual(resp.json()["source_path"], "nope.png")
        self.assertEqual(self.client.get("/api/v1/sprites/tracking").json()["count"], 0)
        self.assertEqual(self.client.get("/api/v1/sprites/placements").json()["count"], 0)

    def test_invalid_sources_are_400(self) -> None:
        for source in ("../escape.png", "noextension"):
            resp = self.client.post("/api/v1/sprites/element", json={"source": source})
            self.assertEqual(resp.status_code, 400, msg=source)
            self.assertEqual(resp.json()["error_code"], "invalid_source_path")

    def test_unsupported_image_is_415(self) -> None:
        (self.image_root / "fake.png").write_bytes(b"plain text")

        resp = self.client.post("/api/v1/sprites/element", json={"source": "fake.png"})

        self.assertEqual(resp.status_code, 415)
        self.assertEqual(resp.json()["error_code"], "unsupported_format")

    def test_bad_tag_is_rejected(self) -> None:
        resp = self.client.post("/api/v1/sprites/element", json={"source": "a.png", "tag": "script"})
        self.assertEqual(resp.status_code, 422)

    def test_style_endpoints(self) -> None:
        _write_png(self.image_root / "a.png", 10, 10)
        _write_png(self.image_root / "a_active.png", 10, 10)
        payload = self.client.post("/api/v1/sprites/element", json={"source": "a.png"}).json()
        cls = payload["class_name"]

        block = self.client.get("/api/v1/sprites/style")
        self.assertEqual(block.status_code, 200)
        self.assertTrue(block.text.startswith('<style type="text/css">'))
        self.assertIn(f".{cls}:active{{", block.text)

        css = self.client.get("/api/v1/sprites/style.css")
        self.assertEqual(css.status_code, 200)
        self.assertTrue(css.headers["content-type"].startswith("text/css"))
        self.assertIn(f".{cls}{{", css.text)
        self.assertIn("url(/api/v1/sprites/sheets/", css.text)

    def test_sheet_file_is_served(self) -> None:
        _write_png(self.image_root / "a.png", 10, 10)
        sheet = self.client.post("/api/v1/sprites/element", json={"source": "a.png"}).json()["placement"]["sheet"]

        resp = self.client.get(f"/api/v1/sprites/sheets/{sheet}.png")

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.headers["content-type"], "image/png")
        self.assertEqual(self.client.get("/api/v1/sprites/sheets/missing.png").status_code, 404)
        self.assertEqual(self.client.get("/api/v1/sprites/sheets/..png").status_code, 404)

    def test_regenerate_prunes_deleted_sources(self) -> None:
        _write_png(self.image_root / "a.png", 10, 10)
        _write_png(self.image_root / "b.png", 10, 10)
        self.client.post("/api/v1/sprites/element", json={"source": "a.png"})
        self.client.post("/api/v1/sprites/element", json={"source": "b.png"})
        (self.image_root / "b.png").unlink()

        resp = self.client.post("/api/v1/sprites/regenerate")

        self.assertEqual(resp.status_code, 200)
        payload = resp.json()
        self.assertEqual(payload["sheet_count"], 1)
        self.assertEqual(payload["pruned"], ["b.png"])
        tracking = self.client.get("/api/v1/sprites/tracking").json()
        self.assertEqual(tracking["tracking"], {"a.png": None})
        placements = self.client.get("/api/v1/sprites/placements").json()
        self.assertEqual(set(placements["placements"]), {"a.png"})


if __name__ == "__main__":
    unittest.main()
