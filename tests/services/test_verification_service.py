"""
Tests for verification_service submission rules.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from sparklink.services.errors import ConflictError, NotFoundError, UpgradeRequiredError
from sparklink.services.verification_service import cancel_request, submit_request, validate_documents

SERVICE = "sparklink.services.verification_service"


def _user(**overrides):
    return {"id": "u1", "subscription": "BLAZE", "verification_status": "NONE", **overrides}


@pytest.fixture
def service_client():
    client = MagicMock()
    client.table.return_value.insert.return_value.execute.return_value = MagicMock(data=[{"id": "req-1"}])
    return client


class TestValidateDocuments:

    def test_resolves_content_type(self):
        checked = validate_documents([(b"%PDF", "cert.pdf", None)])

        assert checked == [(b"%PDF", "cert.pdf", "application/pdf")]

    def test_too_many(self):
        docs = [(b"x", f"{i}.png", "image/png") for i in range(6)]

        with pytest.raises(ValueError, match="At most 5"):
            validate_documents(docs)

    def test_rejects_gif(self):
        with pytest.raises(ValueError):
            validate_documents([(b"GIF89a", "anim.gif", "image/gif")])


class TestSubmitRequest:

    @pytest.mark.asyncio
    async def test_rise_cannot_apply(self, supabase_client, service_client):
        with patch(f"{SERVICE}.get_user", AsyncMock(return_value=_user(subscription="RISE"))):
            with pytest.raises(UpgradeRequiredError) as exc_info:
                await submit_request(supabase_client, "u1", verification_type="IDENTITY", service_client=service_client)

        assert exc_info.value.required_tier == "BLAZE"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["PENDING", "APPROVED"])
    async def test_conflicting_status(self, supabase_client, service_client, status):
        with patch(f"{SERVICE}.get_user", AsyncMock(return_value=_user(verification_status=status))):
            with pytest.raises(ConflictError):
                await submit_request(supabase_client, "u1", verification_type="IDENTITY", service_client=service_client)

    @pytest.mark.asyncio
    async def test_unknown_type(self, supabase_client, service_client):
        with patch(f"{SERVICE}.get_user", AsyncMock(return_value=_user())):
            with pytest.raises(ValueError):
                await submit_request(supabase_client, "u1", verification_type="ROYALTY", service_client=service_client)

    @pytest.mark.asyncio
    async def test_rejected_user_can_reapply(self, supabase_client, service_client):
        with patch(f"{SERVICE}.get_user", AsyncMock(return_value=_user(verification_status="REJECTED"))), \
                patch(f"{SERVICE}.upload_file", AsyncMock(return_value="verification/u1/a.pdf")) as mock_upload, \
                patch(f"{SERVICE}.update_user", AsyncMock()) as mock_update:
            result = await submit_request(
                supabase_client, "u1",
                verification_type="BUSINESS",
                business_info={"name": "Ama Studio"},
                documents=[(b"%PDF", "cert.pdf", "application/pdf")],
                service_client=service_client,
            )

        assert result["request_id"] == "req-1"
        assert result["status"] == "PENDING"
        assert mock_upload.call_args.args[0] is supabase_client
        assert mock_upload.call_args.kwargs["bucket"] == "verification-documents"

        supabase_client.table.return_value.insert.assert_not_called()
        row = service_client.table.return_value.insert.call_args.args[0]
        assert row["request_type"] == "BUSINESS"
        assert row["submitted_data"]["documents"] == ["verification/u1/a.pdf"]
        assert row["submitted_data"]["business_info"] == {"name": "Ama Studio"}

        assert mock_update.call_args.args[0] is service_client
        assert mock_update.call_args.kwargs["verification_status"] == "PENDING"

    @pytest.mark.asyncio
    async def test_failed_insert_removes_uploaded_documents(self, supabase_client, service_client):
        service_client.table.return_value.insert.return_value.execute.side_effect = Exception("db down")
        uploaded = ["verification/u1/a.pdf", "verification/u1/b.png"]

        with patch(f"{SERVICE}.get_user", AsyncMock(return_value=_user())), \
                patch(f"{SERVICE}.upload_file", AsyncMock(side_effect=uploaded)), \
                patch(f"{SERVICE}.delete_file", AsyncMock(return_value=True)) as mock_delete, \
                patch(f"{SERVICE}.update_user", AsyncMock()) as mock_update:
            with pytest.raises(Exception, match="db down"):
                await submit_request(
                    supabase_client, "u1",
                    verification_type="IDENTITY",
                    documents=[(b"%PDF", "id.pdf", "application/pdf"), (b"png", "id.png", "image/png")],
                    service_client=service_client,
                )

        removed = [call.args[2] for call in mock_delete.call_args_list]
        assert removed == uploaded
        assert all(call.args[1] == "verification-documents" for call in mock_delete.call_args_list)
        mock_update.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_upload_removes_earlier_documents(self, supabase_client, service_client):
        with patch(f"{SERVICE}.get_user", AsyncMock(return_value=_user())), \
                patch(f"{SERVICE}.upload_file", AsyncMock(side_effect=["verification/u1/a.pdf", Exception("quota")])), \
                patch(f"{SERVICE}.delete_file", AsyncMock(return_value=True)) as mock_delete:
            with pytest.raises(Exception, match="quota"):
                await submit_request(
                    supabase_client, "u1",
                    verification_type="IDENTITY",
                    documents=[(b"%PDF", "id.pdf", "application/pdf"), (b"png", "id.png", "image/png")],
                    service_client=service_client,
                )

        assert [call.args[2] for call in mock_delete.call_args_list] == ["verification/u1/a.pdf"]
        service_client.table.return_value.insert.assert_not_called()


class TestCancelRequest:

    @pytest.mark.asyncio
    async def test_cancel_pending(self, supabase_client, service_client):
        supabase_client.table.return_value.select.return_value.eq.return_value.eq.return_value.eq.return_value \
            .execute.return_value = MagicMock(data=[{"id": "req-1"}])

        with patch(f"{SERVICE}.update_user", AsyncMock()) as mock_update:
            await cancel_request(supabase_client, "u1", "req-1", service_client=service_client)

        supabase_client.table.return_value.update.assert_not_called()
        changes = service_client.table.return_value.update.call_args.args[0]
        assert changes["status"] == "REJECTED"
        assert changes["review_notes"] == "Cancelled by user"
        assert mock_update.call_args.args[:2] == (service_client, "u1")
        assert mock_update.call_args.kwargs["verification_status"] == "NONE"

    @pytest.mark.asyncio
    async def test_cancel_unknown(self, supabase_client, service_client):
        supabase_client.table.return_value.select.return_value.eq.return_value.eq.return_value.eq.return_value \
            .execute.return_value = MagicMock(data=[])

        with pytest.raises(NotFoundError):
            await cancel_request(supabase_client, "u1", "req-9", service_client=service_client)

        service_client.table.assert_not_called()
