from unittest.mock import MagicMock, Mock, patch

import httpx

from replyflow.services.alert_service import alert_error, format_alert, send_alert


class TestFormatAlert:
    def test_includes_level_and_context(self):
        text = format_alert("ERROR", "Automated reply failed", {"job_id": "j-1"})

        assert text.startswith("❌ *Reply Flow ERROR*")
        assert "Automated reply failed" in text
        assert "job_id: j-1" in text

    def test_unknown_level_icon(self):
        assert format_alert("DEBUG", "x").startswith("📢")


class TestSendAlert:
    @patch("replyflow.services.alert_service.ALERT_BOT_TOKEN", None)
    @patch("replyflow.services.alert_service.ALERT_CHAT_ID", None)
    def test_returns_false_when_not_configured(self):
        assert send_alert("ERROR", "Test message") is False

    @patch("replyflow.services.alert_service.ALERT_BOT_TOKEN", "bot-token")
    @patch("replyflow.services.alert_service.ALERT_CHAT_ID", "ops-chat")
    @patch("replyflow.services.alert_service.httpx.Client")
    def test_posts_to_telegram(self, mock_client_class):
        mock_client = MagicMock()
        mock_client_class.return_value.__enter__.return_value = mock_client
        mock_client.post.return_value = Mock(status_code=200)

        assert alert_error("Automated reply failed", {"session_id": "s-1"}) is True

        url = mock_client.post.call_args[0][0]
        json_data = mock_client.post.call_args[1]["json"]
        assert url == "https://api.telegram.org/botbot-token/sendMessage"
        assert json_data["chat_id"] == "ops-chat"
        assert "session_id: s-1" in json_data["text"]

    @patch("replyflow.services.alert_service.ALERT_BOT_TOKEN", "bot-token")
    @patch("replyflow.services.alert_service.ALERT_CHAT_ID", "ops-chat")
    @patch("replyflow.services.alert_service.httpx.Client")
    def test_returns_false_on_telegram_error(self, mock_client_class):
        mock_client = MagicMock()
        mock_client_class.return_value.__enter__.return_value = mock_client
        mock_client.post.return_value = Mock(status_code=400)

        assert send_alert("ERROR", "Test message") is False

    @patch("replyflow.services.alert_service.ALERT_BOT_TOKEN", "bot-token")
    @patch("replyflow.services.alert_service.ALERT_CHAT_ID", "ops-chat")
    @patch("replyflow.services.alert_service.httpx.Client")
    def test_network_error_does_not_raise(self, mock_client_class):
        mock_client_class.return_value.__enter__.side_effect = httpx.ConnectError("unreachable")

        assert send_alert("ERROR", "Test message") is False
