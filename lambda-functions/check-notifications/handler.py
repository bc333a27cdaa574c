"""
Lambda function to check for new attention set changes and notify.
Triggered by SQS messages sent from clients, or invoked directly with one message.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List

from attention_notifier.config import load_config
from attention_notifier.models import CHECK_NOTIFICATIONS, TriggerEvent
from attention_notifier.worker import NotificationWorker, create_worker

# Configure logging
logger = logging.getLogger()
logger.setLevel(logging.INFO)

# Reused while Lambda keeps the container warm. Holds no state of its own.
_worker = None


def get_worker() -> NotificationWorker:
    global _worker
    if _worker is None:
        _worker = create_worker(load_config())
    return _worker


def extract_messages(event: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Return client messages from an SQS batch or a direct invocation."""
    records = event.get('Records')
    if records is None:
        return [event]

    messages = []
    for record in records:
        try:
            messages.append(json.loads(record['body']))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed SQS record: {e}")
    return messages


async def handle_messages(worker: NotificationWorker, messages: List[Dict[str, Any]]) -> int:
    dispatcher = worker.init()
    events = []
    for message in messages:
        trigger = TriggerEvent.from_message(message)
        if trigger is None:
            # Only this message type exists, but others are not an error
            logger.info(f"Ignoring message of type {message.get('type') if isinstance(message, dict) else None!r}")
            continue
        events.append(dispatcher.dispatch(CHECK_NOTIFICATIONS, trigger))

    # Lambda freezes the container once the handler returns, so every
    # cycle must settle first
    shown = 0
    for event in events:
        results = await event.settled()
        shown += sum(1 for intent in results if intent is not None)
    return shown


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Run a check cycle for every trigger message.
    """
    try:
        messages = extract_messages(event)
        logger.info(f"Received {len(messages)} message(s)")

        shown = asyncio.run(handle_messages(get_worker(), messages))

        logger.info(f"Check complete. Notifications shown: {shown}")
        return {
            'statusCode': 200,
            'body': json.dumps({
                'message': 'Check complete',
                'notifications_shown': shown
            })
        }

    except Exception as e:
        logger.error(f"Error in check-notifications: {str(e)}", exc_info=True)
        return {
            'statusCode': 500,
            'body': json.dumps({'message': 'Check failed'})
        }
