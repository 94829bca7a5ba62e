import logging

logger = logging.getLogger(__name__)


def publish(signal, sender, **kwargs):
    """
    Deliver a domain event to every receiver.

    The event describes a change that is already stored, so a failing
    receiver is logged and does not undo it or stop the other receivers.
    """
    responses = signal.send_robust(sender=sender, **kwargs)
    for receiver, result in responses:
        if isinstance(result, Exception):
            logger.error(
                'Receiver %s.%s failed handling %s event',
                receiver.__module__, getattr(receiver, '__name__', receiver), sender.__name__,
                exc_info=result,
            )
    return responses
