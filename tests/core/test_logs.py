from solcollect.core.logs import LogBuffer


def test_log_buffer_redacts_base58_when_enabled() -> None:
    buffer = LogBuffer(redaction_enabled=True)
    entry = buffer.record("wallet", "Secret address VkgXGe7czUXXcWzeWgt6H9VxLJhqioU5AnqRC1Ry2GK")
    assert "VkgX…y2GK" in entry.message
    assert "VkgXGe7czUXXcWzeWgt6H9VxLJhqioU5AnqRC1Ry2GK" not in entry.message


def test_log_buffer_keeps_addresses_by_default() -> None:
    buffer = LogBuffer()
    entry = buffer.record("ledger", "Created VkgXGe7czUXXcWzeWgt6H9VxLJhqioU5AnqRC1Ry2GK", step="submit-create")
    assert "VkgXGe7czUXXcWzeWgt6H9VxLJhqioU5AnqRC1Ry2GK" in entry.message
    assert entry.as_dict()["step"] == "submit-create"


def test_log_buffer_recent_filters_and_limits() -> None:
    buffer = LogBuffer(max_entries=5)
    buffer.record("upload", "u1")
    buffer.record("ledger", "l1")
    buffer.record("upload", "u2")
    buffer.record("wallet", "w1")
    recent_upload = buffer.recent(category="upload", limit=5)
    assert [entry.message for entry in recent_upload] == ["u1", "u2"]
    latest = buffer.latest()
    assert latest is not None and latest.message == "w1"


def test_log_buffer_normalizes_invalid_inputs() -> None:
    buffer = LogBuffer()
    entry = buffer.record("custom", "message", severity="verbose")
    assert entry.category == "system"
    assert entry.severity == "info"


def test_subscribers_receive_entries_until_unsubscribed() -> None:
    buffer = LogBuffer()
    seen: list[str] = []

    def callback(entry) -> None:
        seen.append(entry.message)

    buffer.subscribe(callback)

    buffer.record("system", "first")
    buffer.unsubscribe(callback)
    buffer.record("system", "second")

    assert seen == ["first"]


def test_for_step_groups_entries() -> None:
    buffer = LogBuffer()
    buffer.record("upload", "Uploading image…", step="upload-image")
    buffer.record("upload", "Image URI: file:///x.png", step="upload-image")
    buffer.record("ledger", "Creating NFT…", step="submit-create")

    assert [entry.message for entry in buffer.for_step("upload-image")] == ["Uploading image…", "Image URI: file:///x.png"]
