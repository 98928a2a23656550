"""Canned results used in demo mode and whenever the LLM path degrades."""

from __future__ import annotations

from comeback_coach.models.analysis import Roadmap, RoadmapWeek, SkillAnalysis
from comeback_coach.models.interview import FeedbackSection, InterviewFeedback

MOCK_SKILL_ANALYSIS = SkillAnalysis(
    current_skills=["JavaScript ES5", "HTML5", "CSS3", "Basic React", "Git"],
    outdated_skills=["jQuery", "Bootstrap 3", "Float-based layouts", "AngularJS 1.x"],
    skill_gaps=[
        "TypeScript",
        "Modern React (Hooks, Next.js)",
        "Tailwind CSS",
        "State Management (Redux/Zustand)",
        "CI/CD Basics",
    ],
    suggested_roles=["Frontend Developer", "UI Engineer", "Junior Full Stack Developer"],
    strength_areas=[
        "Strong understanding of web fundamentals",
        "Experience with version control",
        "Problem-solving mindset",
    ],
    improvement_areas=[
        "Modern framework ecosystems",
        "Type safety (TypeScript)",
        "Responsive design patterns",
    ],
    source="mock",
)

MOCK_ROADMAP = Roadmap(
    overall_goal="Modern Frontend Developer Career Comeback",
    estimated_hours=120,
    source="mock",
    weeks=[
        RoadmapWeek(
            week=1,
            title="Foundation Refresher & Modern Standards",
            goals=["Transition from ES5 to ES6+", "Master semantic HTML", "Understand modern CSS layouts"],
            topics=["Arrow Functions & Destructuring", "Flexbox & CSS Grid", "Semantic Web"],
            resources=[
                "MDN Web Docs|https://developer.mozilla.org",
                "JavaScript.info|https://javascript.info",
                "CSS-Tricks Flexbox Guide|https://css-tricks.com/snippets/css/a-guide-to-flexbox",
            ],
            projects=["Refactor a legacy landing page to semantic HTML & Flexbox"],
        ),
        RoadmapWeek(
            week=2,
            title="TypeScript & Modern React",
            goals=["Understand Type Safety", "Learn Functional Components", "Master Hooks"],
            topics=["TypeScript Interfaces & Types", "React useState & useEffect", "Component Lifecycle"],
            resources=[
                "TypeScript Official Handbook|https://www.typescriptlang.org/docs/",
                "React.dev|https://react.dev",
            ],
            projects=["Build a specialized Todo App with TypeScript and Hooks"],
        ),
        RoadmapWeek(
            week=3,
            title="State Management & Styling",
            goals=["Manage complex application state", "Implement modern styling"],
            topics=["Context API vs Redux", "Tailwind CSS Fundamentals", "Responsive Design"],
            resources=[
                "Tailwind CSS Docs|https://tailwindcss.com/docs",
                "Redux Toolkit Quick Start|https://redux-toolkit.js.org/introduction/getting-started",
            ],
            projects=["Create a Weather Dashboard using public API and Tailwind"],
        ),
        RoadmapWeek(
            week=4,
            title="Deployments & Professional Practices",
            goals=["Learn CI/CD pipelines", "Polish portfolio", "Mock interviews"],
            topics=["Git branching strategies", "Vercel/Netlify Deployment", "Code Review Etiquette"],
            resources=[
                "GitHub Actions Docs|https://docs.github.com/en/actions",
                "Vercel Deployment Guide|https://vercel.com/docs",
            ],
            projects=["Deploy your Portfolio and Weather App"],
        ),
    ],
)

MOCK_FEEDBACK = InterviewFeedback(
    overall_score=78,
    source="mock",
    sections=[
        FeedbackSection(
            title="Technical Knowledge",
            score=80,
            feedback="Strong understanding of fundamental concepts with room for growth in advanced topics.",
            highlights=[
                "Clear explanations of core concepts",
                "Good problem-solving approach",
                "Real-world examples used effectively",
            ],
            improvements=[
                "Deepen knowledge in system design",
                "Practice more complex algorithmic problems",
            ],
        ),
        FeedbackSection(
            title="Communication",
            score=85,
            feedback="Excellent communication skills with clear, structured responses.",
            highlights=[
                "Well-organized thoughts",
                "Active listening demonstrated",
                "Professional tone maintained",
            ],
            improvements=[
                "Use more technical terminology",
                "Be more concise in some responses",
            ],
        ),
        FeedbackSection(
            title="Confidence & Presence",
            score=70,
            feedback="Good foundation, but showing some nervousness. Practice will help!",
            highlights=[
                "Honest about knowledge gaps",
                "Willing to ask clarifying questions",
                "Positive attitude",
            ],
            improvements=[
                "Pause before answering to gather thoughts",
                "Maintain steady pace when speaking",
                "Project more confidence in your expertise",
            ],
        ),
    ],
)

ANALYSIS_NARRATION = (
    "Reading your resume...\n",
    "Identifying your current skills and experience...\n",
    "Comparing your background with today's in-demand roles...\n",
    "Highlighting strengths and areas to refresh...\n",
)

ROADMAP_NARRATION = (
    "Mapping your skill gaps to learning goals...\n",
    "Sequencing topics week by week...\n",
    "Picking resources and hands-on projects...\n",
)

INTERVIEW_QUESTIONS = (
    "That's great! Can you tell me more about a challenging technical problem you solved in your previous role?",
    "How have you been keeping your skills current while you were away from the industry?",
    "Walk me through how you would structure a small web application today. Which tools would you pick and why?",
    "Tell me about a time you had to learn a new technology quickly. What was your approach?",
    "What kind of role and team are you looking for as you return to tech?",
)

CHAT_FALLBACK_REPLY = "I apologize, I had trouble processing that. Could you rephrase your response?"
