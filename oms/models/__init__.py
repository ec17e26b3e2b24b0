from oms.models.broadcast import Broadcast, BroadcastAttachment, BroadcastRecipient
from oms.models.document import Document
from oms.models.employee import Employee
from oms.models.invitation import Invitation
from oms.models.leave import Leave, LeaveAttachment
from oms.models.meeting import Meeting, MeetingAgendaItem, MeetingAttendee
from oms.models.mentorship import Mentorship, MentorshipGoal, MentorshipNote
from oms.models.message import Message
from oms.models.notification import Notification
from oms.models.onboarding_step import OnboardingStep
from oms.models.task import Task, TaskAttachment, TaskReview, TaskUpdate
from oms.models.user import User
from oms.models.welcome_video import WelcomeVideo

__all__ = [ "Broadcast", "BroadcastAttachment", "BroadcastRecipient", "Document",
           "Employee", "Invitation", "Leave", "LeaveAttachment",
           "Meeting", "MeetingAgendaItem", "MeetingAttendee",
           "Mentorship", "MentorshipGoal", "MentorshipNote", "Message",
           "Notification", "OnboardingStep", "Task", "TaskAttachment",
           "TaskReview", "TaskUpdate", "User", "WelcomeVideo" ]
