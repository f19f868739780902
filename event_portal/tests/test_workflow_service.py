import pytest

from event_portal.core.errors import ForbiddenError, NotFoundError, ValidationError
from event_portal.domain.events.status import CommentType, EventStatus, NotificationType
from event_portal.repositories.base import PersistenceError
from event_portal.repositories.memory_repo import MemoryEventRepository
from event_portal.services.workflow_service import EventWorkflowService

S = EventStatus


def organizer_inbox(repos, users):
    return repos.notifications.find(user_id=users["organizer"].id)


# =====================================================
# Happy path through the approval chain
# =====================================================
def test_submit_draft_for_gm_approval(workflow, repos, users, add_event, clock):
    event = add_event()
    clock.advance(hours=1)

    result = workflow.change_status(event.id, "pending_gm", users["organizer"].id)

    assert (result.previous_status, result.new_status) == (S.DRAFT, S.PENDING_GM)
    stored = repos.events.find_by_id(event.id)
    assert stored.status == S.PENDING_GM
    assert stored.updated_at == clock.now()
    # no milestone for submission and no comment given
    assert organizer_inbox(repos, users) == []
    assert repos.comments.find(event_id=event.id) == []


def test_gm_forward_with_comment(workflow, repos, users, add_event):
    event = add_event(status=S.PENDING_GM)

    workflow.change_status(event.id, "pending_marketing", users["gm"].id, "  Looks good  ")

    comments = repos.comments.find(event_id=event.id)
    assert len(comments) == 1
    assert comments[0].comment == "Looks good"
    assert comments[0].comment_type == CommentType.APPROVAL
    assert (comments[0].status_from, comments[0].status_to) == (S.PENDING_GM, S.PENDING_MARKETING)

    inbox = organizer_inbox(repos, users)
    assert [n.title for n in inbox] == [
        "Event Progressed to Marketing Review",
        "New Comment on Your Event",
    ]
    assert all(n.type == NotificationType.EVENT_UPDATED for n in inbox)
    assert inbox[1].message == 'prasert added a comment to "Showroom Weekend": "Looks good"'
    assert inbox[0].action_url == f"/events/{event.id}"
    assert inbox[0].related_entity_id == event.id


def test_final_approval_quotes_comment(workflow, repos, users, add_event):
    event = add_event(status=S.PENDING_MARKETING)

    workflow.change_status(event.id, "approved", users["mh"].id, "Go ahead")

    approved = [n for n in organizer_inbox(repos, users) if n.type == NotificationType.EVENT_APPROVED]
    assert len(approved) == 1
    assert approved[0].title == "Event Approved!"
    assert approved[0].message == 'Great news! Your event "Showroom Weekend" has been approved with comment: "Go ahead".'


def test_rejection_without_comment(workflow, repos, users, add_event):
    event = add_event(status=S.PENDING_GM)

    workflow.change_status(event.id, "rejected", users["gm"].id)

    inbox = organizer_inbox(repos, users)
    assert len(inbox) == 1
    assert inbox[0].type == NotificationType.EVENT_REJECTED
    assert inbox[0].message == 'Your event "Showroom Weekend" was rejected by prasert. Please review and revise.'


def test_rejection_comment_typed_rejection(workflow, repos, users, add_event):
    event = add_event(status=S.PENDING_MARKETING)

    workflow.change_status(event.id, "rejected", users["mh"].id, "Budget too high")

    [comment] = repos.comments.find(event_id=event.id)
    assert comment.comment_type == CommentType.REJECTION
    rejected = [n for n in organizer_inbox(repos, users) if n.type == NotificationType.EVENT_REJECTED]
    assert rejected[0].message.endswith('with feedback: "Budget too high".')


def test_organizer_revision_comment_not_notified_as_comment(workflow, repos, users, add_event):
    event = add_event(status=S.REJECTED)

    workflow.change_status(event.id, "draft", users["organizer"].id, "Reworking the budget")

    [comment] = repos.comments.find(event_id=event.id)
    assert comment.comment_type == CommentType.FEEDBACK
    inbox = organizer_inbox(repos, users)
    assert [n.title for n in inbox] == ["Event Ready for Revision"]


def test_long_comment_truncated_in_notification(workflow, repos, users, add_event):
    event = add_event(status=S.PENDING_GM)
    text = "x" * 150

    workflow.change_status(event.id, "draft", users["gm"].id, text)

    [notification] = organizer_inbox(repos, users)
    assert notification.title == "New Comment on Your Event"
    assert notification.message.endswith('"' + "x" * 100 + '..."')
    # stored comment keeps the full text
    assert repos.comments.find(event_id=event.id)[0].comment == text


def test_blank_comment_not_stored(workflow, repos, users, add_event):
    event = add_event(status=S.PENDING_GM)

    workflow.change_status(event.id, "pending_marketing", users["gm"].id, "   ")

    assert repos.comments.find(event_id=event.id) == []
    assert [n.title for n in organizer_inbox(repos, users)] == ["Event Progressed to Marketing Review"]


# =====================================================
# Completion gate
# =====================================================
def test_completion_lists_every_missing_metric(workflow, repos, users, add_event):
    event = add_event(status=S.APPROVED)

    with pytest.raises(ValidationError) as exc:
        workflow.change_status(event.id, "completed", users["organizer"].id)

    assert exc.value.message == (
        "Cannot mark event as completed. Missing actual values: "
        "Actual Cost, Actual Leads, Actual Orders. "
        "Please update the event with actual results first."
    )
    assert repos.events.find_by_id(event.id).status == S.APPROVED


def test_zero_actual_cost_counts_as_missing(workflow, users, add_event):
    event = add_event(status=S.APPROVED, actual_budget=0, actual_enquiries=10, actual_orders=0)

    with pytest.raises(ValidationError) as exc:
        workflow.change_status(event.id, "completed", users["organizer"].id)

    assert "Missing actual values: Actual Cost." in exc.value.message


def test_completion_with_metrics(workflow, repos, users, add_event):
    event = add_event(status=S.APPROVED, actual_budget=90000, actual_enquiries=55, actual_orders=0)

    result = workflow.change_status(event.id, "completed", users["mm"].id)

    assert result.new_status == S.COMPLETED
    [notification] = organizer_inbox(repos, users)
    assert notification.title == "Event Completed Successfully!"


def test_completed_is_terminal(workflow, users, add_event):
    event = add_event(status=S.COMPLETED, actual_budget=1, actual_enquiries=1, actual_orders=1)

    with pytest.raises(ValidationError) as exc:
        workflow.change_status(event.id, "draft", users["admin"].id)

    assert exc.value.message == "Invalid status transition"


# =====================================================
# Rejections
# =====================================================
def test_unknown_status_value(workflow, users, add_event):
    event = add_event()

    with pytest.raises(ValidationError) as exc:
        workflow.change_status(event.id, "archived", users["admin"].id)

    assert exc.value.message == "Invalid status value"


def test_missing_edge_is_validation_error(workflow, repos, users, add_event):
    event = add_event()

    with pytest.raises(ValidationError) as exc:
        workflow.change_status(event.id, "approved", users["admin"].id)

    assert exc.value.message == "Invalid status transition"
    assert repos.events.find_by_id(event.id).status == S.DRAFT


def test_forbidden_leaves_no_trace(workflow, repos, users, add_event):
    event = add_event(status=S.PENDING_GM)

    with pytest.raises(ForbiddenError) as exc:
        workflow.change_status(event.id, "pending_marketing", users["organizer"].id, "please")

    assert exc.value.message == "Only General Manager can approve and forward to Marketing Head"
    assert repos.events.find_by_id(event.id).status == S.PENDING_GM
    assert repos.comments.find(event_id=event.id) == []
    assert repos.notifications.find() == []


def test_non_creator_cannot_submit(workflow, users, add_event):
    event = add_event()

    with pytest.raises(ForbiddenError) as exc:
        workflow.change_status(event.id, "pending_gm", users["other_sm"].id)

    assert exc.value.message == "Only the event creator can submit their own events"


def test_unknown_event_and_actor(workflow, users, add_event):
    event = add_event()

    with pytest.raises(NotFoundError):
        workflow.change_status("EVT-missing", "pending_gm", users["organizer"].id)
    with pytest.raises(NotFoundError):
        workflow.change_status(event.id, "pending_gm", "u-ghost")


# =====================================================
# Full cycles
# =====================================================
def test_full_lifecycle(workflow, repos, users, add_event):
    event = add_event()

    workflow.change_status(event.id, "pending_gm", users["organizer"].id)
    workflow.change_status(event.id, "pending_marketing", users["gm"].id)
    workflow.change_status(event.id, "approved", users["mh"].id)

    stored = repos.events.find_by_id(event.id)
    stored.actual_budget = 95000
    stored.actual_enquiries = 80
    stored.actual_orders = 9
    repos.events.save(stored)

    result = workflow.change_status(event.id, "completed", users["organizer"].id)

    assert result.new_status == S.COMPLETED
    titles = [n.title for n in organizer_inbox(repos, users)]
    assert titles == [
        "Event Progressed to Marketing Review",
        "Event Approved!",
        "Event Completed Successfully!",
    ]


@pytest.mark.parametrize("rounds", [1, 3])
def test_revision_cycles_accumulate_comments(workflow, repos, users, add_event, rounds):
    event = add_event()

    for i in range(rounds):
        workflow.change_status(event.id, "pending_gm", users["organizer"].id)
        workflow.change_status(event.id, "rejected", users["gm"].id, f"round {i}")
        workflow.change_status(event.id, "draft", users["organizer"].id)

    comments = repos.comments.find(event_id=event.id)
    assert len(comments) == rounds
    assert all(c.comment_type == CommentType.REJECTION for c in comments)
    assert repos.events.find_by_id(event.id).status == S.DRAFT


@pytest.mark.parametrize("rounds", [1, 2, 4])
def test_marketing_rejection_cycle(workflow, repos, users, add_event, rounds):
    event = add_event(status=S.REJECTED)
    steps = [
        ("draft", "organizer", CommentType.FEEDBACK),
        ("pending_gm", "organizer", CommentType.GENERAL),
        ("pending_marketing", "gm", CommentType.APPROVAL),
        ("rejected", "mh", CommentType.REJECTION),
    ]

    for i in range(rounds):
        for target, actor, _ in steps:
            workflow.change_status(event.id, target, users[actor].id, f"{target} #{i}")

    comments = repos.comments.find(event_id=event.id)
    assert len(comments) == rounds * len(steps)
    assert [c.comment_type for c in comments[:4]] == [t for _, _, t in steps]
    assert repos.events.find_by_id(event.id).status == S.REJECTED


@pytest.mark.parametrize("status", list(EventStatus))
def test_same_status_request_rejected(workflow, repos, users, add_event, status):
    event = add_event(status=status, actual_budget=1000, actual_enquiries=5, actual_orders=1)

    with pytest.raises(ValidationError) as exc:
        workflow.change_status(event.id, status.value, users["admin"].id, "again")

    assert exc.value.message == "Invalid status transition"
    assert repos.comments.find(event_id=event.id) == []


# =====================================================
# Failure handling
# =====================================================
class ExplodingNotifier:
    def notify_status_change(self, *args, **kwargs):
        raise RuntimeError("mail relay down")


def test_notification_failure_does_not_fail_status_change(repos, users, add_event, clock):
    workflow = EventWorkflowService(repos, ExplodingNotifier(), clock)
    event = add_event(status=S.PENDING_GM)

    result = workflow.change_status(event.id, "pending_marketing", users["gm"].id, "ok")

    assert result.new_status == S.PENDING_MARKETING
    assert repos.events.find_by_id(event.id).status == S.PENDING_MARKETING
    assert len(repos.comments.find(event_id=event.id)) == 1


class BrokenEventRepository(MemoryEventRepository):
    def save(self, entity):
        raise PersistenceError("save failed on events")


def test_persistence_failure_propagates(repos, users, add_event, clock):
    event = add_event(status=S.PENDING_GM)
    repos.events = BrokenEventRepository(repos.events.db)
    workflow = EventWorkflowService(repos, clock=clock)

    with pytest.raises(PersistenceError):
        workflow.change_status(event.id, "pending_marketing", users["gm"].id, "ok")

    assert repos.comments.find(event_id=event.id) == []
    assert repos.notifications.find() == []


# =====================================================
# Comments and queries
# =====================================================
def test_add_comment(workflow, repos, users, add_event, clock):
    event = add_event(status=S.PENDING_GM)

    comment = workflow.add_comment(event.id, users["gm"].id, " Check the venue ")

    assert comment.comment == "Check the venue"
    assert comment.comment_type == CommentType.GENERAL
    assert comment.status_from is None
    assert comment.created_at == clock.now()
    assert repos.notifications.find() == []


def test_add_blank_comment_rejected(workflow, users, add_event):
    event = add_event()

    with pytest.raises(ValidationError) as exc:
        workflow.add_comment(event.id, users["gm"].id, "  ")

    assert exc.value.message == "Comment text is required"


def test_list_comments_oldest_first(workflow, users, add_event, clock):
    event = add_event()
    workflow.add_comment(event.id, users["gm"].id, "first")
    clock.advance(minutes=5)
    workflow.add_comment(event.id, users["mh"].id, "second")

    assert [c.comment for c in workflow.list_comments(event.id)] == ["first", "second"]


def test_available_transitions(workflow, users, add_event):
    event = add_event(status=S.PENDING_GM)

    options = {o.status: o for o in workflow.available_transitions(event.id, users["gm"].id)}

    assert set(options) == {S.PENDING_MARKETING, S.REJECTED, S.DRAFT}
    assert all(o.allowed for o in options.values())

    options = workflow.available_transitions(event.id, users["organizer"].id)
    assert not any(o.allowed for o in options)


def test_permission_queries(workflow, users, add_event):
    event = add_event()

    assert workflow.check_edit_permission(event.id, users["organizer"].id).allowed
    assert not workflow.check_delete_permission(event.id, users["mh"].id).allowed
    with pytest.raises(NotFoundError):
        workflow.check_edit_permission("EVT-missing", users["organizer"].id)
