from __future__ import annotations
import json
from llm.providers.base import LLMProvider

class MockProvider(LLMProvider):
    def generate(self, *, system: str, user: str, model: str | None = None) -> str:
        """
        Returns dummy responses based on the prompt content.
        """
        # Check if it's an extraction request (look for keywords in user prompt)
        if "Extract all academic tasks" in user:
            return json.dumps({
                "tasks": [
                    {
                        "title": "Problem set 3",
                        "description": "Exercises 1-10 from chapter 4",
                        "type": "assignment",
                        "dueDate": None,
                        "priority": "medium"
                    },
                    {
                        "title": "Midterm exam",
                        "description": "Covers chapters 1-5",
                        "type": "quiz",
                        "dueDate": None,
                        "priority": "high"
                    }
                ]
            })

        if "flashcards" in user.lower():
            return json.dumps({
                "flashcards": [
                    {"question": "What was this lecture about?", "answer": "See the summary."}
                ]
            })

        if "summarize" in user.lower():
            return "## Summary\n- Key concepts of the lecture."

        # Default fallback
        return "{}"
