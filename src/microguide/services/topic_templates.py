"""Curated curriculum templates for well-known topics.

Read-only reference data: each template lists ordered modules, and each
module carries curated resources, practice exercises and assessments. The
synthesis engine slices a module prefix by difficulty and turns it into
learning nodes.
"""

from typing import Dict, List, Literal, Tuple

from pydantic import BaseModel

from microguide.schemas.paths import ContentType


class LearningResource(BaseModel):
    title: str
    description: str
    type: ContentType
    url: str | None = None
    duration: int  # minutes
    platform: str
    difficulty: str = "beginner"


class TopicModule(BaseModel):
    title: str
    description: str
    concepts: List[str] = []
    skills: List[str] = []
    resources: List[LearningResource] = []
    exercises: List[str] = []
    assessments: List[str] = []


class TopicTemplate(BaseModel):
    category: str
    subcategory: str
    learning_type: Literal["theoretical", "practical", "mixed"]
    estimated_hours: int
    prerequisites: List[str] = []
    outcomes: List[str] = []
    modules: List[TopicModule]


def _resource(
    title: str,
    description: str,
    type_: str,
    url: str,
    duration: int,
    platform: str,
    difficulty: str = "beginner",
) -> dict:
    return {
        "title": title,
        "description": description,
        "type": type_,
        "url": url,
        "duration": duration,
        "platform": platform,
        "difficulty": difficulty,
    }


_CHESS = {
    "category": "strategy-games",
    "subcategory": "board-games",
    "learning_type": "mixed",
    "estimated_hours": 30,
    "outcomes": [
        "Understand all chess rules and piece movements",
        "Apply basic tactical patterns in games",
        "Execute fundamental opening principles",
        "Recognize common endgame patterns",
        "Analyze chess positions effectively",
    ],
    "modules": [
        {
            "title": "Chess Fundamentals",
            "description": "Rules, piece movements and board setup",
            "concepts": [
                "Board setup and orientation",
                "Piece values and movements",
                "Special moves (castling, en passant)",
                "Check, checkmate and stalemate",
                "Basic chess notation",
            ],
            "skills": [
                "Piece movement accuracy",
                "Legal move recognition",
                "Basic notation reading",
                "Game setup",
            ],
            "resources": [
                _resource(
                    "Chess.com Learn Chess Basics",
                    "Interactive lessons covering the rules and piece movements",
                    "course",
                    "https://www.chess.com/learn-how-to-play-chess",
                    60,
                    "Chess.com",
                ),
                _resource(
                    "Chess Rules and Basics - ChessNetwork",
                    "Video walkthrough of every rule with board demonstrations",
                    "video",
                    "https://www.youtube.com/watch?v=OCSbzArwB10",
                    45,
                    "YouTube",
                ),
                _resource(
                    "Lichess Learn Chess",
                    "Free interactive lessons with practice exercises",
                    "course",
                    "https://lichess.org/learn",
                    90,
                    "Lichess",
                ),
            ],
            "exercises": [
                "Set up the board correctly 10 times",
                "Move each piece type around an empty board",
                "Identify legal and illegal moves in given positions",
                "Write moves in algebraic notation",
            ],
            "assessments": [
                "Chess rules quiz (20 questions)",
                "Piece movement accuracy test",
                "Notation reading exercise",
            ],
        },
        {
            "title": "Basic Tactics",
            "description": "Fundamental tactical patterns and combinations",
            "concepts": [
                "Pins",
                "Forks",
                "Skewers",
                "Discovered attacks",
                "Double attacks and combinations",
            ],
            "skills": [
                "Pattern recognition",
                "Tactical calculation",
                "Threat assessment",
                "Combination planning",
            ],
            "resources": [
                _resource(
                    "Chess Tactics for Beginners",
                    "Guide to the basic tactical motifs with examples",
                    "article",
                    "https://www.chess.com/article/view/chess-tactics",
                    30,
                    "Chess.com",
                ),
                _resource(
                    "Chess Tactics Trainer",
                    "Puzzle training with progressive difficulty",
                    "course",
                    "https://www.chess.com/puzzles",
                    120,
                    "Chess.com",
                ),
                _resource(
                    "Lichess Puzzle Training",
                    "Thousands of free tactical positions",
                    "course",
                    "https://lichess.org/training",
                    90,
                    "Lichess",
                ),
            ],
            "exercises": [
                "Solve 50 basic tactical puzzles",
                "Build 5 tactical positions from your own games",
                "Find the tactics in annotated master games",
                "Timed solving at 3 minutes per puzzle",
            ],
            "assessments": [
                "Tactical pattern recognition test",
                "Timed puzzle challenge",
                "Position analysis exercise",
            ],
        },
        {
            "title": "Opening Principles",
            "description": "How to start a game effectively",
            "concepts": [
                "Center control",
                "Piece development order",
                "King safety",
                "Time and tempo",
            ],
            "skills": [
                "Opening preparation",
                "Development planning",
                "Pawn structure understanding",
                "Repertoire building",
            ],
            "resources": [
                _resource(
                    "Chess Opening Principles",
                    "The opening principles every player should know",
                    "article",
                    "https://www.chess.com/article/view/chess-opening-principles",
                    25,
                    "Chess.com",
                ),
                _resource(
                    "Opening Explorer",
                    "Opening database with statistics and master games",
                    "course",
                    "https://lichess.org/analysis",
                    60,
                    "Lichess",
                ),
                _resource(
                    "Basic Chess Openings Explained",
                    "Video series on the most important openings",
                    "video",
                    "https://www.youtube.com/watch?v=21L45Qo6EIY",
                    40,
                    "YouTube",
                ),
            ],
            "exercises": [
                "Learn the Italian Game main line",
                "Practice the Queen's Gambit",
                "Analyze 10 master games focusing on the opening",
                "Build a basic repertoire for White and Black",
            ],
            "assessments": [
                "Opening principles quiz",
                "Repertoire presentation",
                "Opening-phase game analysis",
            ],
        },
    ],
}

_COOKING = {
    "category": "life-skills",
    "subcategory": "culinary",
    "learning_type": "practical",
    "estimated_hours": 25,
    "outcomes": [
        "Execute basic cooking techniques safely",
        "Prepare balanced, nutritious meals",
        "Understand flavor combinations and seasoning",
        "Plan and organize meal preparation",
        "Adapt recipes to dietary needs",
    ],
    "modules": [
        {
            "title": "Kitchen Safety & Setup",
            "description": "Safety practices and kitchen organization",
            "concepts": [
                "Food safety fundamentals",
                "Kitchen hygiene",
                "Equipment safety",
                "Food storage",
            ],
            "skills": [
                "Safe food handling",
                "Kitchen organization",
                "Equipment operation",
                "Sanitation",
            ],
            "resources": [
                _resource(
                    "Food Safety Basics",
                    "Safe minimum cooking temperatures and handling rules",
                    "article",
                    "https://www.foodsafety.gov/food-safety-charts/safe-minimum-cooking-temperatures",
                    20,
                    "FoodSafety.gov",
                ),
                _resource(
                    "Kitchen Setup and Organization",
                    "Organizing a kitchen for efficient cooking",
                    "video",
                    "https://www.youtube.com/watch?v=4ur5YQIbOSs",
                    15,
                    "YouTube",
                ),
                _resource(
                    "Essential Kitchen Tools Guide",
                    "The equipment a home cook actually needs",
                    "article",
                    "https://www.seriouseats.com/basic-knife-skills",
                    25,
                    "Serious Eats",
                ),
            ],
            "exercises": [
                "Organize your workspace for efficiency",
                "Write a food safety checklist for your kitchen",
                "Practice hand washing and sanitization",
                "Set up mise en place for a simple recipe",
            ],
            "assessments": [
                "Food safety quiz",
                "Kitchen organization review",
                "Safety procedure demonstration",
            ],
        },
        {
            "title": "Knife Skills & Food Prep",
            "description": "Cutting techniques and ingredient preparation",
            "concepts": [
                "Knife types and uses",
                "Basic cuts",
                "Preparation methods",
                "Prep timing",
            ],
            "skills": [
                "Knife handling",
                "Uniform cutting",
                "Efficient prep",
                "Speed and accuracy",
            ],
            "resources": [
                _resource(
                    "Basic Knife Skills",
                    "Professional knife technique for home cooks",
                    "video",
                    "https://www.youtube.com/watch?v=G-Fg7l7G1zw",
                    30,
                    "YouTube",
                ),
                _resource(
                    "Knife Skills Guide - Serious Eats",
                    "Written guide to the core knife techniques",
                    "article",
                    "https://www.seriouseats.com/basic-knife-skills",
                    20,
                    "Serious Eats",
                ),
                _resource(
                    "Food Prep Techniques",
                    "Preparation methods and time-saving tips",
                    "video",
                    "https://www.youtube.com/watch?v=nffGuGwCdZE",
                    25,
                    "YouTube",
                ),
            ],
            "exercises": [
                "Julienne carrots",
                "Dice onions uniformly",
                "Brunoise mixed vegetables",
                "Prep every ingredient for a full meal",
            ],
            "assessments": [
                "Knife skills demonstration",
                "Cutting accuracy and speed test",
                "Prep efficiency review",
            ],
        },
    ],
}

_GUITAR = {
    "category": "music",
    "subcategory": "instruments",
    "learning_type": "practical",
    "estimated_hours": 40,
    "outcomes": [
        "Play basic chords and progressions fluently",
        "Read tablature and basic notation",
        "Perform simple songs with proper technique",
        "Understand basic music theory for guitar",
        "Keep an effective practice routine",
    ],
    "modules": [
        {
            "title": "Guitar Basics & Setup",
            "description": "Anatomy, posture, tuning and care",
            "concepts": [
                "Guitar anatomy",
                "Sitting and standing posture",
                "Tuning methods",
                "String names and fret numbering",
                "Basic maintenance",
            ],
            "skills": [
                "Holding the guitar",
                "Accurate tuning",
                "Basic maintenance",
                "Posture awareness",
            ],
            "resources": [
                _resource(
                    "Guitar Basics for Beginners",
                    "Introduction to guitar fundamentals",
                    "video",
                    "https://www.youtube.com/watch?v=F5bqTVNXOLs",
                    45,
                    "YouTube",
                ),
                _resource(
                    "JustinGuitar Beginner Course",
                    "Structured beginner course with progressive lessons",
                    "course",
                    "https://www.justinguitar.com/guitar-lessons/beginner-guitar-course-grade-1",
                    120,
                    "JustinGuitar",
                ),
                _resource(
                    "Guitar Tuning Guide",
                    "Different ways to tune your guitar",
                    "article",
                    "https://www.fender.com/articles/how-to/how-to-tune-a-guitar",
                    15,
                    "Fender",
                ),
            ],
            "exercises": [
                "Hold the guitar in sitting and standing positions",
                "Tune using two different methods",
                "Name every string and the first 12 frets",
                "Set up a comfortable practice space",
            ],
            "assessments": [
                "Guitar anatomy quiz",
                "Tuning accuracy test",
                "Posture review",
            ],
        },
        {
            "title": "First Chords & Strumming",
            "description": "Open chords and strumming patterns",
            "concepts": [
                "Open chord shapes",
                "Finger placement",
                "Strumming patterns",
                "Rhythm fundamentals",
                "Chord transitions",
            ],
            "skills": [
                "Clean chord formation",
                "Steady strumming",
                "Smooth chord changes",
                "Keeping time",
            ],
            "resources": [
                _resource(
                    "Basic Guitar Chords",
                    "The essential open chords",
                    "video",
                    "https://www.youtube.com/watch?v=NGXSoVRDQTE",
                    30,
                    "YouTube",
                ),
                _resource(
                    "Strumming Patterns for Beginners",
                    "Strumming patterns every guitarist uses",
                    "video",
                    "https://www.youtube.com/watch?v=oXerhIdTR8Y",
                    25,
                    "YouTube",
                ),
                _resource(
                    "Ultimate Guitar Chord Chart",
                    "Chord diagrams and fingering guide",
                    "article",
                    "https://www.ultimate-guitar.com/lessons/for_beginners/basic_guitar_chords.html",
                    20,
                    "Ultimate Guitar",
                ),
            ],
            "exercises": [
                "Master G, C, D, Em and Am",
                "One-minute chord change drills",
                "Down-up strumming pattern",
                "Play your first complete song",
            ],
            "assessments": [
                "Chord clarity review",
                "Strumming rhythm test",
                "Song performance",
            ],
        },
    ],
}

_PROGRAMMING = {
    "category": "technology",
    "subcategory": "software-development",
    "learning_type": "practical",
    "estimated_hours": 50,
    "outcomes": [
        "Build responsive web applications",
        "Understand programming fundamentals",
        "Use version control effectively",
        "Debug and troubleshoot code",
        "Deploy applications to production",
    ],
    "modules": [
        {
            "title": "Programming Fundamentals",
            "description": "Core programming concepts and problem solving",
            "concepts": [
                "Variables and data types",
                "Control structures",
                "Functions and scope",
                "Algorithms and logic",
                "Problem decomposition",
            ],
            "skills": [
                "Logical thinking",
                "Problem solving",
                "Code organization",
                "Debugging basics",
            ],
            "resources": [
                _resource(
                    "freeCodeCamp JavaScript Basics",
                    "JavaScript fundamentals with algorithm practice",
                    "course",
                    "https://www.freecodecamp.org/learn/javascript-algorithms-and-data-structures/",
                    180,
                    "freeCodeCamp",
                ),
                _resource(
                    "MDN JavaScript Guide",
                    "Mozilla's reference guide to JavaScript",
                    "article",
                    "https://developer.mozilla.org/en-US/docs/Web/JavaScript/Guide",
                    120,
                    "MDN",
                ),
                _resource(
                    "JavaScript Crash Course",
                    "Fast-paced introduction to JavaScript",
                    "video",
                    "https://www.youtube.com/watch?v=hdI2bqOjy3c",
                    90,
                    "YouTube",
                ),
            ],
            "exercises": [
                "Build a simple calculator",
                "Write a number guessing game",
                "Implement two basic sorting algorithms",
                "Solve coding challenges on HackerRank",
            ],
            "assessments": [
                "Programming logic quiz",
                "Code review exercise",
                "Algorithm implementation test",
            ],
        },
        {
            "title": "HTML & CSS Mastery",
            "description": "Structure and style web pages",
            "concepts": [
                "Semantic HTML",
                "CSS selectors and properties",
                "Flexbox and Grid",
                "Responsive design",
            ],
            "skills": [
                "Clean markup",
                "Flexible layouts",
                "Cross-browser compatibility",
                "Mobile-first design",
            ],
            "resources": [
                _resource(
                    "freeCodeCamp Responsive Web Design",
                    "HTML and CSS from the ground up",
                    "course",
                    "https://www.freecodecamp.org/learn/responsive-web-design/",
                    150,
                    "freeCodeCamp",
                ),
                _resource(
                    "CSS-Tricks Complete Guide to Flexbox",
                    "Reference guide to Flexbox",
                    "article",
                    "https://css-tricks.com/snippets/css/a-guide-to-flexbox/",
                    30,
                    "CSS-Tricks",
                    "intermediate",
                ),
                _resource(
                    "HTML & CSS Crash Course",
                    "Build a website from scratch",
                    "video",
                    "https://www.youtube.com/watch?v=UB1O30fR-EE",
                    120,
                    "YouTube",
                ),
            ],
            "exercises": [
                "Build a personal portfolio site",
                "Create responsive layouts with Flexbox",
                "Design a mobile-first page",
                "Add CSS transitions and animations",
            ],
            "assessments": [
                "Semantic HTML review",
                "CSS layout challenge",
                "Responsive design review",
            ],
        },
    ],
}

_PHOTOGRAPHY = {
    "category": "creative",
    "subcategory": "visual-arts",
    "learning_type": "mixed",
    "estimated_hours": 35,
    "outcomes": [
        "Understand camera controls and settings",
        "Compose compelling photographs",
        "Control lighting effectively",
        "Edit photos professionally",
        "Develop a personal style",
    ],
    "modules": [
        {
            "title": "Camera Fundamentals",
            "description": "Camera controls and technical basics",
            "concepts": [
                "Exposure triangle (aperture, shutter, ISO)",
                "Camera modes",
                "Focus systems",
                "Metering",
            ],
            "skills": [
                "Manual exposure",
                "Focus accuracy",
                "Camera operation",
                "Technical problem solving",
            ],
            "resources": [
                _resource(
                    "Photography Basics: The Complete Beginner's Guide",
                    "Introduction to photography fundamentals",
                    "article",
                    "https://www.photographylife.com/photography-basics",
                    45,
                    "Photography Life",
                ),
                _resource(
                    "Understanding Exposure",
                    "The exposure triangle and camera settings",
                    "video",
                    "https://www.youtube.com/watch?v=3_79_gdhvZc",
                    30,
                    "YouTube",
                ),
                _resource(
                    "Camera Settings Explained",
                    "What each camera mode does",
                    "article",
                    "https://digital-photography-school.com/camera-modes/",
                    25,
                    "Digital Photography School",
                ),
            ],
            "exercises": [
                "Shoot in manual mode under three lighting conditions",
                "Compare shallow and deep depth of field",
                "Track focus on a moving subject",
                "Create an exposure bracket series",
            ],
            "assessments": [
                "Technical knowledge quiz",
                "Exposure accuracy review",
                "Camera operation test",
            ],
        },
    ],
}

TOPIC_TEMPLATES: Dict[str, TopicTemplate] = {
    key: TopicTemplate.model_validate(data)
    for key, data in (
        ("chess", _CHESS),
        ("cooking", _COOKING),
        ("guitar", _GUITAR),
        ("programming", _PROGRAMMING),
        ("photography", _PHOTOGRAPHY),
    )
}

# Expanded match phrases per template key, checked after direct key containment.
TOPIC_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("chess", ("chess", "board game", "strategy game", "checkmate", "tactics")),
    (
        "cooking",
        ("cooking", "cook", "recipe", "kitchen", "food", "culinary", "baking", "chef"),
    ),
    (
        "guitar",
        ("guitar", "music", "instrument", "strings", "chord", "acoustic", "electric"),
    ),
    (
        "programming",
        (
            "programming",
            "coding",
            "web development",
            "javascript",
            "html",
            "css",
            "software",
            "developer",
        ),
    ),
    (
        "photography",
        ("photography", "photo", "camera", "picture", "image", "lens", "exposure"),
    ),
)

# Internal template category -> public catalog taxonomy.
CATEGORY_TO_TOPIC: Dict[str, str] = {
    "strategy-games": "design",
    "life-skills": "business",
    "music": "design",
    "creative": "design",
    "technology": "web-development",
    "science": "data-science",
    "business": "business",
    "general": "business",
}


def map_category_to_topic(category: str) -> str:
    """Map an internal category onto the public topic taxonomy."""
    return CATEGORY_TO_TOPIC.get(category, "business")
