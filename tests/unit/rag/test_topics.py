"""Tests for query topic classification."""

from __future__ import annotations

from unipilot.rag.topics import Topic, classify_query


def test_fees_keywords():
    assert classify_query("Which university is cheapest?") == {Topic.FEES}
    assert classify_query("What does it COST to study?") == {Topic.FEES}


def test_admissions_keywords():
    assert classify_query("Admission requirements for medicine") == {Topic.ADMISSIONS}


def test_multiple_topics():
    topics = classify_query("fees and degree programs")
    assert topics == {Topic.FEES, Topic.PROGRAMS}


def test_accommodation_keywords():
    assert classify_query("Is there student housing?") == {Topic.ACCOMMODATION}


def test_general_when_nothing_matches():
    assert classify_query("Tell me about the campus") == {Topic.GENERAL}
    assert classify_query("") == {Topic.GENERAL}


def test_tuition_alone_is_not_a_fees_query():
    assert classify_query("tuition") == {Topic.GENERAL}
