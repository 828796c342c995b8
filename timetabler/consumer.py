import json
import logging
import pika
import time
from typing import Any, Callable, Dict, Optional

from config.settings import _parse_bool, get_rabbitmq_config, get_scheduler_config
from timetabler.exceptions import GenerationInProgressError, TimetablerError
from timetabler.models.class_def import ClassDef
from timetabler.models.generation_config import GenerationConfig
from timetabler.models.roster import Roster
from timetabler.models.subject import Subject
from timetabler.models.teacher import Teacher
from timetabler.models.timetable import Timetable
from timetabler.services.allocator import GenerationGuard, generate_timetables
from timetabler.services.store import TimetableStore
from timetabler.services.substitution import accept_substitution, request_substitution
from timetabler.services.teacher_view import teacher_timetable
from timetabler.utils.checks import check_hard_constraints, fill_statistics
from timetabler.utils.export import timetable_rows, to_tab_delimited

logger = logging.getLogger(__name__)

generation_guard = GenerationGuard()


def parse_classes(data: Dict[str, Any]) -> Dict[str, ClassDef]:
    """
    Converts the "classes" mapping of a message into ClassDef objects.

    Expected format:
    {
        "10A": {"subjects": [{"name": "Math", "credits": 3, "teachers": ["T-1", "T-2"]}],
                "students": ["S-1", "S-2"]},
        ...
    }
    """
    classes = {}
    for class_name, class_data in (data or {}).items():
        subjects = [
            Subject(
                name=str(subject["name"]),
                credits=int(subject["credits"]),
                teachers=[str(t) for t in subject.get("teachers", [])]
            )
            for subject in class_data.get("subjects", [])
        ]
        classes[str(class_name)] = ClassDef(
            name=str(class_name),
            subjects=subjects,
            students=[str(s) for s in class_data.get("students", [])]
        )
    return classes


def parse_roster(data: Dict[str, Any]) -> Roster:
    """
    Converts JSON data received from RabbitMQ into a Roster.

    Expected format:
    {
        "teachers": {"T-1": {"name": "Ada", "weeklyRequiredHours": 12,
                             "hoursLeft": 12, "expertise": "Math"}, ...},
        "classes": {... see parse_classes ...}
    }
    """
    teachers = {}
    for teacher_id, teacher in data.get("teachers", {}).items():
        weekly = int(teacher["weeklyRequiredHours"])
        hours_left = teacher.get("hoursLeft")
        teachers[str(teacher_id)] = Teacher(
            id=str(teacher_id),
            name=str(teacher.get("name", "")),
            weekly_required_hours=weekly,
            hours_left=int(hours_left) if hours_left is not None else weekly,
            expertise=str(teacher.get("expertise") or "")
        )

    return Roster(teachers=teachers, classes=parse_classes(data.get("classes", {})))


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return _parse_bool(str(value))


def parse_generation_config(data: Optional[Dict[str, Any]]) -> GenerationConfig:
    """Builds a GenerationConfig from the environment defaults and request overrides"""
    defaults = get_scheduler_config()
    data = data or {}
    seed = data.get("seed", defaults["seed"])
    return GenerationConfig(
        working_days=int(data.get("workingDays", defaults["working_days"])),
        hours_per_day=int(data.get("hoursPerDay", defaults["hours_per_day"])),
        break_slots=[int(s) for s in data.get("breakSlots", defaults["break_slots"])],
        free_period_percentage=float(data.get("freePeriodPercentage", defaults["free_period_percentage"])),
        seed=int(seed) if seed is not None else None,
        carry_over_hours=_as_bool(data.get("carryOverHours", defaults["carry_over_hours"]))
    )


def encode_timetable(timetable: Timetable):
    if get_scheduler_config()["encode_as_string"]:
        return timetable.to_json()
    return timetable.to_list()


def error_response(e: Exception) -> Dict[str, Any]:
    code = e.code if isinstance(e, TimetablerError) else "INTERNAL_ERROR"
    return {"status": "error", "code": code, "message": str(e)}


def process_generate_timetable(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Processes a timetable generation request.

    Args:
        data: Roster and optional "config" overrides

    Returns:
        Dictionary with the generated timetables and updated teacher hours
    """
    try:
        logger.info("Starting timetable generation...")

        roster = parse_roster(data)
        config = parse_generation_config(data.get("config"))

        logger.info(f"Data parsed: {len(roster.classes)} classes, "
                    f"{len(roster.teachers)} teachers")

        result = generate_timetables(roster, config, guard=generation_guard)

        violations = check_hard_constraints(result.timetables, roster.teachers)
        logger.info(f"Generation completed. Violations: {violations}")

        return {
            "status": "success",
            "message": "Timetable generated successfully!",
            "data": {
                "timetables": {
                    name: encode_timetable(timetable)
                    for name, timetable in result.timetables.items()
                },
                "teacherHours": result.hours_left,
                "droppedPeriods": result.dropped,
                "statistics": {
                    "hard_constraints_satisfied": violations == 0,
                    "hard_constraints_cost": violations,
                    "total_dropped": result.total_dropped,
                    "cells": fill_statistics(result.timetables)
                }
            }
        }

    except GenerationInProgressError as e:
        logger.warning(f"Rejected generation request: {e}")
        return error_response(e)

    except TimetablerError as e:
        logger.warning(f"Cannot generate timetable: {e}")
        return error_response(e)

    except Exception as e:
        logger.error(f"Error generating timetable: {e}", exc_info=True)
        return {
            "status": "error",
            "code": "INTERNAL_ERROR",
            "message": f"Failed to generate timetable: {str(e)}"
        }


def _substitution_target(data: Dict[str, Any]):
    store = TimetableStore(parse_classes(data.get("classes", {})), data.get("timetables", {}))
    return (store, str(data["className"]), int(data["day"]), int(data["period"]),
            str(data["teacherId"]))


def process_request_substitution(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Processes a "cannot attend" action on a confirmed slot.

    Expected format:
    {
        "classes": {...}, "timetables": {"10A": "<json grid>" or [[...]], ...},
        "className": "10A", "day": 0, "period": 0, "teacherId": "T-1"
    }
    """
    try:
        store, class_name, day, period, teacher_id = _substitution_target(data)
        outcome = request_substitution(store, class_name, day, period, teacher_id)

        return {
            # Running out of substitutes is informational, not an error
            "status": "info" if outcome.released else "success",
            "message": outcome.message,
            "data": {
                "slot": outcome.slot.to_dict(),
                "candidateId": outcome.candidate_id,
                "timetable": encode_timetable(store.get_timetable(class_name))
            }
        }

    except (TimetablerError, KeyError, ValueError) as e:
        logger.warning(f"Cannot process substitution request: {e}")
        return error_response(e)

    except Exception as e:
        logger.error(f"Error processing substitution request: {e}", exc_info=True)
        return error_response(e)


def process_accept_substitution(data: Dict[str, Any]) -> Dict[str, Any]:
    """Processes a substitute teacher accepting a pending request"""
    try:
        store, class_name, day, period, teacher_id = _substitution_target(data)
        outcome = accept_substitution(store, class_name, day, period, teacher_id)

        return {
            "status": "success",
            "message": outcome.message,
            "data": {
                "slot": outcome.slot.to_dict(),
                "timetable": encode_timetable(store.get_timetable(class_name))
            }
        }

    except (TimetablerError, KeyError, ValueError) as e:
        logger.warning(f"Cannot accept substitution: {e}")
        return error_response(e)

    except Exception as e:
        logger.error(f"Error accepting substitution: {e}", exc_info=True)
        return error_response(e)


def process_teacher_timetable(data: Dict[str, Any]) -> Dict[str, Any]:
    """Builds one teacher's consolidated timetable across all classes"""
    try:
        config = parse_generation_config(data.get("config"))
        store = TimetableStore(timetables=data.get("timetables", {}))
        view = teacher_timetable(store.all_timetables(), str(data["teacherId"]),
                                 config.working_days, config.hours_per_day)

        return {
            "status": "success",
            "message": "Teacher timetable built",
            "data": {"timetable": view.to_list()}
        }

    except (TimetablerError, KeyError, ValueError) as e:
        logger.warning(f"Cannot build teacher timetable: {e}")
        return error_response(e)

    except Exception as e:
        logger.error(f"Error building teacher timetable: {e}", exc_info=True)
        return error_response(e)


def process_export_timetable(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Produces the header and day rows of a class timetable for an external
    renderer, plus the tab-delimited text export.
    """
    try:
        defaults = get_scheduler_config()
        options = data.get("config") or {}
        day_start = options.get("dayStart", defaults["day_start"])
        period_minutes = int(options.get("periodMinutes", defaults["period_minutes"]))
        placeholder = data.get("placeholder", "N/A")

        timetable = Timetable.from_raw(data.get("timetable"))

        return {
            "status": "success",
            "message": f"Timetable for {data.get('className', '')} exported",
            "data": {
                "rows": timetable_rows(timetable, day_start, period_minutes, placeholder),
                "text": to_tab_delimited(timetable, day_start, period_minutes, placeholder)
            }
        }

    except (TimetablerError, KeyError, ValueError) as e:
        logger.warning(f"Cannot export timetable: {e}")
        return error_response(e)

    except Exception as e:
        logger.error(f"Error exporting timetable: {e}", exc_info=True)
        return error_response(e)


COMMANDS: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    "generate_timetable": process_generate_timetable,
    "request_substitution": process_request_substitution,
    "accept_substitution": process_accept_substitution,
    "teacher_timetable": process_teacher_timetable,
    "export_timetable": process_export_timetable,
}


def handle_message(message: Dict[str, Any]) -> Dict[str, Any]:
    """Dispatches a decoded message to its command handler"""
    command = message.get("pattern")

    if command == "test_connection":
        return {"status": "success", "message": "Connection established"}

    handler = COMMANDS.get(command)
    if handler is None:
        return {"status": "error", "message": f"Unknown command: {command}"}

    logger.info(f"Processing {command} request")
    return handler(message.get("data") or {})


def publish_reply(ch, properties, result: Dict[str, Any]):
    if not properties.reply_to:
        return
    ch.basic_publish(
        exchange="",
        routing_key=properties.reply_to,
        properties=pika.BasicProperties(correlation_id=properties.correlation_id),
        body=json.dumps(result),
    )
    logger.info(f"Response sent for correlation_id: {properties.correlation_id}")


def callback(ch, method, properties, body):
    """Message callback - processes the request, replies and acknowledges"""
    correlation_id = properties.correlation_id

    try:
        logger.info(f"Received message: {correlation_id}")
        message = json.loads(body)
        result = handle_message(message)
        publish_reply(ch, properties, result)

    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in message: {e}")

    except Exception as e:
        logger.error(f"Unexpected error in callback: {e}", exc_info=True)

    finally:
        try:
            ch.basic_ack(delivery_tag=method.delivery_tag)
        except Exception as e:
            logger.warning(f"Error acknowledging message: {e}")


def create_connection_and_channel(rabbitmq_config):
    """Create RabbitMQ connection and channel with proper configuration"""
    connection_params = pika.ConnectionParameters(
        host=rabbitmq_config["host"],
        port=rabbitmq_config["port"],
        virtual_host=rabbitmq_config["vhost"],
        credentials=pika.PlainCredentials(
            username=rabbitmq_config["username"], password=rabbitmq_config["password"]
        ),
        heartbeat=rabbitmq_config["heartbeat"],
        blocked_connection_timeout=rabbitmq_config["blocked_connection_timeout"],
        socket_timeout=rabbitmq_config["socket_timeout"],
        connection_attempts=rabbitmq_config["connection_attempts"],
        retry_delay=rabbitmq_config["retry_delay"],
    )

    connection = pika.BlockingConnection(connection_params)
    channel = connection.channel()

    # One request at a time: generation owns the teacher ledger until it finishes
    queue_name = rabbitmq_config["queue_name"]
    channel.queue_declare(queue=queue_name, durable=True)
    channel.basic_qos(prefetch_count=1)

    return connection, channel, queue_name


def _close_quietly(channel, connection):
    try:
        if channel and not channel.is_closed:
            channel.stop_consuming()
            channel.close()
    except Exception as e:
        logger.warning(f"Error closing channel: {e}")

    try:
        if connection and not connection.is_closed:
            connection.close()
    except Exception as e:
        logger.warning(f"Error closing connection: {e}")


def start_consumer():
    """
    Consumes the request queue until interrupted.

    Lost or refused connections are retried up to max_reconnect_attempts
    times in a row, waiting reconnect_delay seconds first and half as long
    again after every further failure, capped at max_reconnect_delay. A
    successful connection resets the count.
    """
    rabbitmq_config = get_rabbitmq_config()
    max_attempts = rabbitmq_config["max_reconnect_attempts"]
    delay = rabbitmq_config["reconnect_delay"]
    failures = 0

    while failures < max_attempts:
        connection = None
        channel = None

        try:
            logger.info(f"Starting consumer (attempt {failures + 1}/{max_attempts})")
            connection, channel, queue_name = create_connection_and_channel(rabbitmq_config)
            failures = 0
            delay = rabbitmq_config["reconnect_delay"]

            channel.basic_consume(queue=queue_name, on_message_callback=callback)
            logger.info(f"Consumer started, listening on queue: {queue_name}")
            channel.start_consuming()

        except (pika.exceptions.StreamLostError, pika.exceptions.AMQPConnectionError) as e:
            failures += 1
            logger.error(f"Connection failed: {e}. Attempt {failures}/{max_attempts}")

        except KeyboardInterrupt:
            logger.info("Shutdown signal received, stopping consumer...")
            break

        except Exception as e:
            failures += 1
            logger.error(f"Unexpected error: {e}. Attempt {failures}/{max_attempts}", exc_info=True)

        finally:
            _close_quietly(channel, connection)

        if failures < max_attempts:
            logger.info(f"Reconnecting in {delay} seconds...")
            time.sleep(delay)
            delay = min(delay * 1.5, rabbitmq_config["max_reconnect_delay"])

    else:
        logger.error(f"Max reconnection attempts ({max_attempts}) reached. Exiting.")


if __name__ == "__main__":
    start_consumer()
