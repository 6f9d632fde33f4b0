# tests/v1/test_reports.py
"""Tests for the instructor report endpoints."""

import pytest
from fastapi import status

from eduverse.models import Course, Post, Reaction

REPORT_PATHS = ["/api/users/report", "/api/users/report2", "/api/users/report3", "/api/users/report4"]


@pytest.mark.parametrize("path", REPORT_PATHS)
def test_reports_forbidden_for_students(client, path: str, auth_token) -> None:
    response = client.get(path, headers=auth_token)
    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.parametrize("path", REPORT_PATHS)
def test_reports_wrap_payload(client, path: str, instructor_token) -> None:
    response = client.get(path, headers=instructor_token)
    assert response.status_code == status.HTTP_200_OK
    assert "report" in response.json()


def test_reaction_distribution_endpoint(
    client, db_session, make_user, test_post: Post, admin_token
) -> None:
    voters = [make_user(f"Voter {index}") for index in range(3)]
    for voter in voters:
        db_session.add(Reaction(post_id=test_post.id, sender_id=voter.id, type="like"))
    db_session.commit()

    report = client.get("/api/users/report3", headers=admin_token).json()["report"]
    assert report["grandTotal"] == 3
    assert report["mostPopularReaction"] == "like"
    assert report["reactionBreakdown"][0]["uniqueUsersCount"] == 3


def test_course_performance_mine(client, db_session, make_user, course, instructor_token) -> None:
    other_prof = make_user("Other Prof", role="instructor")
    other_course = Course(id="BIO1", name="Biology", capacity=10)
    other_course.instructors.append(other_prof)
    db_session.add(other_course)
    db_session.commit()

    everything = client.get("/api/users/report4", headers=instructor_token).json()["report"]
    assert {entry["courseId"] for entry in everything} == {"CS101", "BIO1"}

    mine = client.get(
        "/api/users/report4", params={"mine": "true"}, headers=instructor_token
    ).json()["report"]
    assert [entry["courseId"] for entry in mine] == ["CS101"]
    assert mine[0]["instructors"][0]["name"] == "Dr. Instructor"
