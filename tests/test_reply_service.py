from replyflow.models import Message
from replyflow.services.eligibility_service import AgentContext
from replyflow.services.llm.base import LLMResponse
from replyflow.services.reply_service import (
    respond_with_generated_reply,
    respond_with_outside_hours_message,
    send_and_record,
)
from replyflow.services.whapi_service import SendResult


def _context(conversation, **fields):
    data = {
        "session_id": conversation.id,
        "channel_id": conversation.channel_id,
        "system_prompt": "You are a helpful AI assistant.",
        "max_tokens": 300,
        "messages": ({"role": "user", "content": "Are you open?"},),
    }
    data.update(fields)
    return AgentContext(**data)


class TestRespondWithGeneratedReply:
    def test_sends_and_records_reply(self, db, company, channel, make_conversation, provider, gateway):
        conversation = make_conversation()

        message = respond_with_generated_reply(db, company.id, _context(conversation), provider, gateway)

        provider.complete.assert_called_once_with(
            "You are a helpful AI assistant.", 300, [{"role": "user", "content": "Are you open?"}]
        )
        gateway.send_text.assert_called_once_with(
            "whapi-token", "4917612345678@s.whatsapp.net", "Hi Lena, we open at 9."
        )
        assert message.direction == "outbound"
        assert message.sender_type == "ai"
        assert message.status == "sent"
        assert message.read is True
        assert message.external_message_id == "wamid.out-1"
        assert conversation.last_message == "Hi Lena, we open at 9."
        assert conversation.last_message_direction == "outbound"
        assert conversation.last_message_sender == "ai"

    def test_joins_text_blocks_only(self, db, company, channel, make_conversation, provider, gateway):
        conversation = make_conversation()
        provider.complete.return_value = LLMResponse(
            content=[
                {"type": "text", "text": "Line one"},
                {"type": "tool_use", "id": "t1", "name": "lookup", "input": {}},
                {"type": "text", "text": "Line two"},
            ]
        )

        respond_with_generated_reply(db, company.id, _context(conversation), provider, gateway)

        assert gateway.send_text.call_args[0][2] == "Line one\nLine two"

    def test_blank_reply_is_a_silent_no_op(self, db, company, channel, make_conversation, provider, gateway):
        conversation = make_conversation()
        provider.complete.return_value = LLMResponse(content=[{"type": "text", "text": "  \n "}])

        assert respond_with_generated_reply(db, company.id, _context(conversation), provider, gateway) is None
        gateway.send_text.assert_not_called()
        assert db.query(Message).count() == 0


class TestOutsideHoursMessage:
    def test_sends_exact_text_without_completion(self, db, company, channel, make_conversation, provider, gateway):
        conversation = make_conversation()

        message = respond_with_outside_hours_message(
            db, company.id, conversation.id, channel.id, "We're closed", gateway
        )

        provider.complete.assert_not_called()
        gateway.send_text.assert_called_once_with("whapi-token", "4917612345678@s.whatsapp.net", "We're closed")
        assert message.message_body == "We're closed"
        assert message.sender_type == "ai"


class TestSendAndRecord:
    def test_keeps_qualified_chat_id(self, db, company, channel, make_conversation, gateway):
        conversation = make_conversation(chat_id="120363012345@g.us")

        send_and_record(db, company.id, conversation.id, channel.id, "Hello group", gateway)

        assert gateway.send_text.call_args[0][1] == "120363012345@g.us"

    def test_disconnected_channel_is_a_silent_no_op(self, db, company, channel, make_conversation, gateway):
        channel.channel_status = "disconnected"
        conversation = make_conversation()
        db.flush()

        assert send_and_record(db, company.id, conversation.id, channel.id, "Hello", gateway) is None
        gateway.send_text.assert_not_called()

    def test_missing_token_is_a_silent_no_op(self, db, company, channel, make_conversation, gateway):
        channel.channel_token = None
        conversation = make_conversation()
        db.flush()

        assert send_and_record(db, company.id, conversation.id, channel.id, "Hello", gateway) is None
        gateway.send_text.assert_not_called()

    def test_missing_external_id_tolerated(self, db, company, channel, make_conversation, gateway):
        gateway.send_text.return_value = SendResult()
        conversation = make_conversation()

        message = send_and_record(db, company.id, conversation.id, channel.id, "Hello", gateway)

        assert message.external_message_id is None
