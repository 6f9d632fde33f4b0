"""EduVerse: course-based social learning API."""
