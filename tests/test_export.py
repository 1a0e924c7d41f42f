"""Tests for the JSON export."""

from __future__ import annotations

import json
from pathlib import Path

from refdocs.config import RefDocsConfig
from refdocs.export import EXPORT_VERSION, groups_to_dict, write_json
from refdocs.processor import process
from refdocs.provider import ManifestProvider
from tests._fixtures.manifest_builder import ManifestBuilder

API = "example.com/guestbook/api/v1"
META = "k8s.io/apimachinery/pkg/apis/meta/v1"


def test_export_lists_groups_and_reachable_types(guestbook_api: Path) -> None:
    groups = process(RefDocsConfig(root=guestbook_api), ManifestProvider())

    data = groups_to_dict(groups)

    assert data["version"] == EXPORT_VERSION
    (group,) = data["groups"]
    assert group["namespace"] == "webapp.test.k8s.elastic.co"
    assert group["kinds"] == ["Embedded", "Guestbook", "GuestbookList"]
    assert group["types"]["Guestbook"] == f"{API}.Guestbook"
    assert group["roots"] == {
        "Embedded": f"{API}.Embedded",
        "Guestbook": f"{API}.Guestbook",
        "GuestbookList": f"{API}.GuestbookList",
    }

    catalog = data["types"]
    guestbook = catalog[f"{API}.Guestbook"]
    assert guestbook["kind"] == "struct"
    assert guestbook["references"] == [f"{API}.GuestbookList"]
    assert guestbook["root_kind"] == {
        "namespace": "webapp.test.k8s.elastic.co",
        "version": "v1",
        "kind": "Guestbook",
    }
    assert [f["name"] for f in guestbook["fields"]] == ["kind", "apiVersion", "metadata", "spec", "status"]
    assert guestbook["fields"][2]["type"] == f"{META}.ObjectMeta"
    # Types reachable only through fields are part of the catalog.
    assert f"{META}.ObjectMeta" in catalog
    assert catalog["string"]["kind"] == "basic"
    assert catalog["string"]["basic"] is True
    assert guestbook["basic"] is False
    assert catalog[f"{API}.Rating"]["underlying"] == "string"


def test_export_handles_cycles(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.write(
        {
            "tree.yml": """
            path: example.com/tree/v1
            markers:
              groupName: tree.example
            types:
              - name: Node
                fields:
                  - name: Next
                    type: "*Node"
                    json: next
            """
        }
    )
    groups = process(RefDocsConfig(root=manifest_builder.path()), ManifestProvider())

    catalog = groups_to_dict(groups)["types"]

    assert catalog["example.com/tree/v1.Node"]["references"] == ["example.com/tree/v1.Node"]
    assert catalog["*example.com/tree/v1.Node"]["underlying"] == "example.com/tree/v1.Node"


def test_write_json_writes_file(tmp_path: Path, guestbook_api: Path) -> None:
    groups = process(RefDocsConfig(root=guestbook_api), ManifestProvider())
    output = tmp_path / "out" / "graph.json"

    text = write_json(groups, output)

    assert output.read_text(encoding="utf-8") == text + "\n"
    assert json.loads(text)["groups"][0]["version"] == "v1"
    assert write_json(groups) == text
