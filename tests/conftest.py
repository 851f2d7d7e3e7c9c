from decimal import Decimal

import pytest
from django.core.cache import cache

from accounts.models import User
from gradebooks.models import Component, Gradebook, GradebookTrainee
from gradebooks.permissions import actor_from_user
from trainees.models import Qualification, Trainee


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


def _user(email, role, **extra):
    return User.objects.create_user(email=email, password="pw-12345!", role=role, **extra)


@pytest.fixture
def trainer(db):
    return _user("trainer@example.com", User.Role.TRAINER, first_name="Thandi", last_name="Mokoena")


@pytest.fixture
def hot(db):
    return _user("hot@example.com", User.Role.HEAD_OF_TRAINING)


@pytest.fixture
def ac(db):
    return _user("ac@example.com", User.Role.ASSESSMENT_COORDINATOR)


@pytest.fixture
def trainee_user(db):
    return _user("learner@example.com", User.Role.TRAINEE)


@pytest.fixture
def other_trainer(db):
    return _user("trainer2@example.com", User.Role.TRAINER, first_name="Pieter", last_name="Botha")


@pytest.fixture
def trainer_actor(trainer):
    return actor_from_user(trainer)


@pytest.fixture
def hot_actor(hot):
    return actor_from_user(hot)


@pytest.fixture
def ac_actor(ac):
    return actor_from_user(ac)


@pytest.fixture
def trainee_actor(trainee_user):
    return actor_from_user(trainee_user)


@pytest.fixture
def other_trainer_actor(other_trainer):
    return actor_from_user(other_trainer)


@pytest.fixture
def qualification(db):
    return Qualification.objects.create(code="ELEC-N2", title="Electrician", trade="Electrician")


@pytest.fixture
def trainees(qualification, trainee_user):
    return [
        Trainee.objects.create(
            trainee_number="T001", first_name="Anele", last_name="Zulu",
            qualification=qualification, level=1, user=trainee_user,
        ),
        Trainee.objects.create(
            trainee_number="T002", first_name="Brandon", last_name="Adams",
            qualification=qualification, level=1,
        ),
    ]


@pytest.fixture
def gradebook(qualification, trainer):
    return Gradebook.objects.create(
        qualification=qualification, trainer=trainer, academic_year="2025", title="Electrical Theory N2",
    )


@pytest.fixture
def enrolled(gradebook, trainees):
    for t in trainees:
        GradebookTrainee.objects.create(gradebook=gradebook, trainee=t)
    return trainees


@pytest.fixture
def components(gradebook):
    specs = [
        ("Theory Test 1", "test", "100"),
        ("Theory Test 2", "test", "50"),
        ("Mock Exam", "mock", "100"),
        ("Wiring Practical", "practical", "20"),
    ]
    return [
        Component.objects.create(
            gradebook=gradebook, name=name, component_type=ctype, max_marks=Decimal(max_marks), sort_order=i,
        )
        for i, (name, ctype, max_marks) in enumerate(specs, start=1)
    ]
