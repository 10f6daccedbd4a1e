from transcripts_machine.models.llm import ModelChoice

PAGE_ACTION_MODEL = ModelChoice.OPENAI_GPT4O_MINI
TRANSCRIPT_STRUCTURING_MODEL = ModelChoice.OPENAI_GPT4O_MINI
SUMMARIZER_MODEL = ModelChoice.GEMINI_FLASH_LITE
