import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import main


CONTRACT_TEXT = (
    "第一条 标的\n甲方向乙方采购办公设备一批，包括台式电脑、打印机和会议系统，具体型号、数量及配置以附件一所列清单为准。\n"
    "第二条 价款\n合同总价为人民币十万元整，该价款已包含设备费、运输费、安装调试费以及相关税费，除本合同另有约定外不再调整。\n"
    "第三条 交付\n乙方应于合同签订后三十日内将全部设备运抵甲方指定地点，并完成安装调试，交付时双方共同签署验收单。"
)

STATUTE_TEXT = (
    "第一条 为了规范行政处罚的设定和实施，保障和监督行政机关有效实施行政管理，"
    "维护公共利益和社会秩序，保护公民、法人或者其他组织的合法权益，根据宪法，制定本法。"
)


@pytest.fixture
def client():
    return TestClient(main.app)


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "operational"


def test_health_lists_splitters(client):
    body = client.get("/health").json()

    assert body["splitters"] == {
        "legal": "LegalDocumentSplitter",
        "contract": "ContractSplitter",
        "generic": "RecursiveSplitter",
    }
    assert body["settings"]["legal_max_tokens"] > 0


def test_split_contract(client):
    response = client.post("/split", json={
        "text": CONTRACT_TEXT,
        "document_type": "CONTRACT",
        "metadata": {"contract_id": "C-42"},
    })

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["splitter_type"] == "ContractSplitter"
    assert body["segment_count"] == len(body["segments"])
    assert all(s["metadata"]["contract_id"] == "C-42" for s in body["segments"])


def test_split_uses_filename_when_type_missing(client):
    response = client.post("/split", json={
        "text": STATUTE_TEXT,
        "filename": "行政处罚法.pdf",
    })

    body = response.json()
    assert body["splitter_type"] == "LegalDocumentSplitter"
    assert body["segments"][0]["metadata"]["law_category"] == "行政法律"


def test_split_empty_text(client):
    body = client.post("/split", json={"text": ""}).json()

    assert body["success"] is False
    assert body["segments"] == []


def test_upload_text_file(client, tmp_path, monkeypatch):
    monkeypatch.setattr(main, "UPLOADS_DIR", tmp_path)

    response = client.post(
        "/upload",
        files={"file": ("采购合同.txt", CONTRACT_TEXT.encode("utf-8"), "text/plain")},
        data={"document_type": "CONTRACT"},
    )

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert list(tmp_path.iterdir()) == []
    assert body["segments"][0]["metadata"]["original_filename"] == "采购合同.txt"


def test_upload_rejects_unsupported_files(client):
    response = client.post(
        "/upload",
        files={"file": ("contract.docx", b"binary", "application/octet-stream")},
    )

    assert response.status_code == 400


def test_uploads_with_the_same_name_do_not_collide(client, tmp_path, monkeypatch):
    monkeypatch.setattr(main, "UPLOADS_DIR", tmp_path)
    statute = STATUTE_TEXT.encode("utf-8")

    first = client.post("/upload", files={"file": ("行政处罚法.txt", statute, "text/plain")}).json()
    second = client.post("/upload", files={"file": ("行政处罚法.txt", CONTRACT_TEXT.encode("utf-8"), "text/plain")},
                         data={"document_type": "CONTRACT"}).json()

    assert first["splitter_type"] == "LegalDocumentSplitter"
    assert second["splitter_type"] == "ContractSplitter"
    assert list(tmp_path.iterdir()) == []
