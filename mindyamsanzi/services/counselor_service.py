from typing import Any, Dict, List, Optional, Sequence
from dataclasses import dataclass
import logging
import time

from mindyamsanzi.core.config import Settings
from mindyamsanzi.core.database import Database, as_uuid
from mindyamsanzi.core.exceptions import NotFoundError, ValidationError
from mindyamsanzi.models.directory import Mentor, SupportResource, ResourceType
from mindyamsanzi.models.performance_record import PerformanceRecord
from mindyamsanzi.models.student_profile import StudentProfile
from mindyamsanzi.schemas.chat import ChatTurn
from mindyamsanzi.services.ai_gateway import AIGateway
from mindyamsanzi.services.chat_log_service import ConversationLog
from mindyamsanzi.services.context_service import ContextAssembler, format_number
from mindyamsanzi.services.directory_service import DirectoryService
from mindyamsanzi.services.intervention import InterventionDecision, evaluate
from mindyamsanzi.services.profile_service import ProfileService
from mindyamsanzi.utils.prompts import (
    COUNSELOR_SYSTEM_PROMPT,
    STUDENT_CONTEXT_PREAMBLE,
    INTERVENTION_SYSTEM_PROMPT,
    INTERVENTION_CONTEXT_TEMPLATE,
    MARKS_ANALYSIS_REQUEST,
)

logger = logging.getLogger(__name__)

INTERVENTION_TRIGGER = "performance_intervention"


@dataclass
class ChatReply:
    message: str
    chat_id: str
    persisted: bool = False


@dataclass
class InterventionResult:
    triggered: bool
    reason: str
    subject: str
    message: Optional[str] = None
    chat_id: Optional[str] = None
    persisted: bool = False


def _millis() -> int:
    return int(time.time() * 1000)


def render_intervention_prompt(
    decision: InterventionDecision,
    subject: str,
    new_grade: float,
    previous_grade: Optional[float],
    profile: Optional[StudentProfile],
    mentors: Sequence[Mentor],
    resources: Sequence[SupportResource]
) -> str:
    tutors = "\n".join(
        f"- {mentor.name} ({mentor.expertise}): {mentor.contact_info}" for mentor in mentors
    ) or "No tutors available"
    study_materials = "\n".join(
        f"- {resource.name}: {resource.description} - {resource.contact_info}" for resource in resources
    ) or "No resources available"

    performance_context = INTERVENTION_CONTEXT_TEMPLATE.format(
        student_name=profile.full_name if profile else "Unknown",
        grade_level=profile.grade if profile and profile.grade is not None else "Unknown",
        subject=subject,
        new_grade=format_number(new_grade),
        previous_grade=format_number(previous_grade) if previous_grade is not None else "First assessment",
        status=decision.label.value,
        tutors=tutors,
        resources=study_materials,
    )
    return INTERVENTION_SYSTEM_PROMPT.format(performance_context=performance_context, subject=subject)


def render_grade_event(subject: str, new_grade: float, previous_grade: Optional[float]) -> str:
    """The synthetic user turn describing the grade event"""
    event = f"Student got {format_number(new_grade)}% in {subject}."
    if previous_grade is None:
        return f"{event} This is their first assessment."
    return f"{event} Previous was {format_number(previous_grade)}%."


def render_marks_request(records: Sequence[PerformanceRecord]) -> str:
    """The user turn asking for an analysis of every recorded mark"""
    lines = []
    for record in records:
        line = f"{record.subject}: {format_number(record.score)}%"
        if record.attendance_percentage:
            line += f" (attendance {format_number(record.attendance_percentage)}%)"
        lines.append(line)
    return MARKS_ANALYSIS_REQUEST.format(marks="\n".join(lines))


class CounselorService:
    """Composes context assembly, the intervention rule, the AI gateway and the conversation log"""

    def __init__(self, settings: Settings, gateway: AIGateway, database: Optional[Database] = None):
        self.settings = settings
        self.gateway = gateway
        self.database = database
        self.conversation_log = ConversationLog(database)
        self.context_assembler = ContextAssembler(database, settings) if database else None

    async def _system_prompt_for(self, student_id: Optional[str]) -> str:
        if not (self.settings.CHAT_INCLUDE_STUDENT_CONTEXT and student_id and self.context_assembler):
            return COUNSELOR_SYSTEM_PROMPT

        try:
            context = await self.context_assembler.build_context(student_id)
        except Exception as e:
            logger.error(f"Could not assemble context for student {student_id}, using plain prompt: {e}")
            return COUNSELOR_SYSTEM_PROMPT

        return f"{COUNSELOR_SYSTEM_PROMPT}\n\n{STUDENT_CONTEXT_PREAMBLE}\n\n{context}"

    async def chat(
        self,
        turns: Sequence[ChatTurn],
        student_id: Optional[str] = None,
        authenticated: bool = False
    ) -> ChatReply:
        """Answer a conversation and log the caller's last turn plus the reply

        Student context is only read for an id taken from a verified token; an
        id that merely arrives in the request body is used for logging alone.
        """
        if not turns:
            raise ValidationError("Missing messages array in body")
        if student_id:
            as_uuid(student_id)

        system_prompt = await self._system_prompt_for(student_id if authenticated else None)
        conversation: List[Dict[str, str]] = [
            {"role": turn.role.value, "content": turn.content} for turn in turns
        ]

        reply = await self.gateway.complete(
            system_prompt,
            conversation,
            max_tokens=self.settings.CHAT_MAX_TOKENS
        )

        persisted = await self.conversation_log.append_exchange(student_id, turns[-1].content, reply)

        return ChatReply(
            message=reply,
            chat_id=f"chat_{_millis()}_{student_id or 'anon'}",
            persisted=persisted,
        )

    async def _load_intervention_help(self, student_id: str):
        if self.database is None:
            logger.warning("No data store configured; intervention prompt will list no help")
            return None, [], []

        limit = self.settings.INTERVENTION_DIRECTORY_LIMIT
        async with self.database.session() as session:
            profile = await ProfileService(session).get_profile(student_id)
            directory = DirectoryService(session)
            mentors = await directory.list_mentors(limit=limit)
            resources = await directory.list_resources(resource_type=ResourceType.TUTORING.value, limit=limit)
        return profile, mentors, resources

    async def intervene(
        self,
        student_id: str,
        subject: str,
        new_grade: float,
        previous_grade: Optional[float] = None
    ) -> InterventionResult:
        """Run the intervention rule and, when it fires, send and log an outreach message"""
        as_uuid(student_id)

        decision = evaluate(new_grade, previous_grade)
        if not decision.trigger:
            return InterventionResult(triggered=False, reason=decision.reason, subject=subject)

        logger.info(f"Intervention for student {student_id} in {subject}: {decision.reason}")

        profile, mentors, resources = await self._load_intervention_help(student_id)
        system_prompt = render_intervention_prompt(
            decision, subject, new_grade, previous_grade, profile, mentors, resources
        )
        grade_event = render_grade_event(subject, new_grade, previous_grade)

        reply = await self.gateway.complete(
            system_prompt,
            [{"role": "user", "content": grade_event}],
            max_tokens=self.settings.INTERVENTION_MAX_TOKENS
        )

        metadata: Dict[str, Any] = {
            "trigger": INTERVENTION_TRIGGER,
            "subject": subject,
            "grade": new_grade,
            "previous_grade": previous_grade,
        }
        persisted = await self.conversation_log.append_intervention(student_id, reply, metadata)

        return InterventionResult(
            triggered=True,
            reason=decision.reason,
            subject=subject,
            message=reply,
            chat_id=f"intervention_{_millis()}_{student_id}",
            persisted=persisted,
        )

    async def analyze_marks(self, student_id: str, records: Sequence[PerformanceRecord]) -> ChatReply:
        """Ask the counselor for an encouraging read of the student's marks and log the exchange"""
        if not records:
            raise NotFoundError("No performance records to analyze")
        as_uuid(student_id)

        request_text = render_marks_request(records)
        reply = await self.gateway.complete(
            COUNSELOR_SYSTEM_PROMPT,
            [{"role": "user", "content": request_text}],
            max_tokens=self.settings.CHAT_MAX_TOKENS
        )

        persisted = await self.conversation_log.append_exchange(student_id, request_text, reply)

        return ChatReply(
            message=reply,
            chat_id=f"analysis_{_millis()}_{student_id}",
            persisted=persisted,
        )
