"""Deterministic sample data for local development.

Generates a board of jobs and a sample assessment for the first few of them.
Output depends only on the ``random_seed`` so repeated runs (and tests)
produce the same titles, statuses and tags.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List

from talentflow.logic.repository_assessments import save_assessment
from talentflow.logic.repository_jobs import count_jobs, create_job, slugify

logger = logging.getLogger(__name__)

JOB_TITLES = [
    "Senior Frontend Developer",
    "Backend Engineer",
    "Full Stack Developer",
    "DevOps Engineer",
    "Product Manager",
    "UX Designer",
    "Data Scientist",
    "Mobile Developer",
    "QA Engineer",
    "Technical Lead",
    "Software Architect",
    "Site Reliability Engineer",
    "Security Engineer",
    "Machine Learning Engineer",
    "Cloud Engineer",
    "Database Administrator",
    "UI Designer",
    "Scrum Master",
    "Business Analyst",
    "Technical Writer",
]

TECH_TAGS = [
    "React",
    "Node.js",
    "Python",
    "TypeScript",
    "AWS",
    "Docker",
    "Kubernetes",
    "GraphQL",
    "PostgreSQL",
    "MongoDB",
    "Redis",
    "Elasticsearch",
    "Microservices",
    "REST API",
    "Machine Learning",
    "Vue.js",
    "Java",
    "Go",
    "Rust",
    "Kotlin",
]


@dataclass
class SeedJob:
    id: str
    title: str
    slug: str
    status: str
    tags: List[str]


@dataclass
class SeedData:
    jobs: List[SeedJob] = field(default_factory=list)
    # job_id -> {title, description, sections} body ready for save_assessment
    assessments: Dict[str, Dict[str, Any]] = field(default_factory=dict)


def sample_assessment(job: SeedJob, index: int) -> Dict[str, Any]:
    """Return the two-section sample assessment body for ``job``.

    The "why this position" question only shows when the candidate answers
    "Yes" to remote work.
    """
    n = index + 1
    return {
        "title": f"{job.title} Assessment",
        "description": f"Technical assessment for {job.title} position",
        "sections": [
            {
                "id": f"section_{n}_1",
                "title": "Technical Skills",
                "description": "Evaluate technical competency",
                "order": 1,
                "questions": [
                    {
                        "id": f"q_{n}_1",
                        "type": "single-choice",
                        "title": "How many years of experience do you have with React?",
                        "required": True,
                        "options": ["0-1 years", "1-3 years", "3-5 years", "5+ years"],
                        "order": 1,
                    },
                    {
                        "id": f"q_{n}_2",
                        "type": "multi-choice",
                        "title": "Which of the following technologies have you worked with?",
                        "required": True,
                        "options": list(job.tags),
                        "order": 2,
                    },
                    {
                        "id": f"q_{n}_3",
                        "type": "long-text",
                        "title": "Describe a challenging technical problem you solved recently.",
                        "required": True,
                        "validation": {"minLength": 100, "maxLength": 1000},
                        "order": 3,
                    },
                ],
            },
            {
                "id": f"section_{n}_2",
                "title": "Experience & Background",
                "order": 2,
                "questions": [
                    {
                        "id": f"q_{n}_4",
                        "type": "short-text",
                        "title": "What is your current job title?",
                        "required": True,
                        "validation": {"maxLength": 100},
                        "order": 1,
                    },
                    {
                        "id": f"q_{n}_5",
                        "type": "numeric",
                        "title": "What is your expected salary range (in thousands)?",
                        "required": False,
                        "validation": {"min": 50, "max": 300},
                        "order": 2,
                    },
                    {
                        "id": f"q_{n}_6",
                        "type": "single-choice",
                        "title": "Are you available for remote work?",
                        "required": True,
                        "options": ["Yes", "No", "Hybrid preferred"],
                        "order": 3,
                    },
                    {
                        "id": f"q_{n}_7",
                        "type": "long-text",
                        "title": "Why are you interested in this position?",
                        "required": True,
                        "conditionalLogic": {"dependsOn": f"q_{n}_6", "showWhen": "Yes"},
                        "validation": {"minLength": 50, "maxLength": 500},
                        "order": 4,
                    },
                ],
            },
        ],
    }


def generate_seed_data(job_count: int = 25, assessment_count: int = 3, random_seed: int = 42) -> SeedData:
    """Build sample jobs and assessments without touching the database."""
    rng = random.Random(random_seed)
    data = SeedData()
    for i in range(job_count):
        title = rng.choice(JOB_TITLES)
        data.jobs.append(
            SeedJob(
                id=f"job_{i + 1}",
                title=title,
                slug=f"{slugify(title)}-{i + 1}",
                status="active" if rng.random() > 0.3 else "archived",
                tags=rng.sample(TECH_TAGS, rng.randint(2, 6)),
            )
        )
    for i, job in enumerate(data.jobs[:assessment_count]):
        data.assessments[job.id] = sample_assessment(job, i)
    return data


def seed_database(job_count: int = 25, assessment_count: int = 3, random_seed: int = 42) -> bool:
    """Insert sample data when the job table is empty; return True when seeded."""
    if count_jobs() > 0:
        logger.info("seed_skipped reason=jobs_present")
        return False
    data = generate_seed_data(job_count, assessment_count, random_seed)
    for job in data.jobs:
        create_job(job.title, job_id=job.id, slug=job.slug, status=job.status, tags=job.tags)
    for job_id, body in data.assessments.items():
        save_assessment(job_id, body)
    logger.info("seed_applied jobs=%s assessments=%s", len(data.jobs), len(data.assessments))
    return True


__all__ = ["SeedJob", "SeedData", "sample_assessment", "generate_seed_data", "seed_database"]
