"""Demo user, sample curriculum and conversation scenarios."""
from __future__ import annotations
import logging
from typing import Dict, List, Optional

from . import schemas
from .security import hash_password
from .storage import Storage

logger = logging.getLogger(__name__)


DEMO_USERNAME = "demo"
DEMO_PASSWORD = "demo123"


def audio_path(text: str) -> str:
	return "/api/audio/" + text.lower().replace(" ", "_")


LESSONS: List[Dict] = [
	{
		"title": "Basic Greetings",
		"description": "Learn essential greetings to start conversations in Portuguese.",
		"duration": 10,
		"order": 1,
		"word_count": 6,
		"status": "in_progress",
	},
	{
		"title": "Ordering Food",
		"description": "Learn vocabulary for restaurants and cafes",
		"duration": 15,
		"order": 2,
		"word_count": 15,
		"status": "available",
	},
	{
		"title": "Getting Around",
		"description": "Transportation and directions vocabulary",
		"duration": 12,
		"order": 3,
		"word_count": 12,
		"status": "available",
	},
	{
		"title": "Shopping",
		"description": "Essential vocabulary for shopping",
		"duration": 15,
		"order": 4,
		"word_count": 18,
		"status": "available",
	},
]

GREETINGS_VOCABULARY: List[Dict] = [
	{"portuguese": "Olá", "english": "Hello", "pronunciation": "oh-LAH", "usage": "Greeting used any time of day"},
	{"portuguese": "Bom dia", "english": "Good morning", "pronunciation": "bohn DEE-ah", "usage": "Morning greeting until noon"},
	{"portuguese": "Boa tarde", "english": "Good afternoon", "pronunciation": "BOH-ah TAR-jay", "usage": "Afternoon greeting until sunset"},
	{"portuguese": "Boa noite", "english": "Good night", "pronunciation": "BOH-ah NOY-chay", "usage": "Evening greeting and farewell"},
	{"portuguese": "Como vai?", "english": "How are you?", "pronunciation": "KOH-moh vye", "usage": "Casual greeting"},
	{"portuguese": "Tchau", "english": "Goodbye", "pronunciation": "chow", "usage": "Casual goodbye"},
]

GREETINGS_QUIZ: List[Dict] = [
	{
		"question": "What does 'Olá' mean?",
		"correct_answer": "Hello",
		"explanation": "'Olá' is a generic greeting used at any time of day in Portuguese.",
		"options": ["Hello", "Goodbye", "Thank you", "Please"],
	},
	{
		"question": "What does 'Bom dia' mean?",
		"correct_answer": "Good morning",
		"explanation": "'Bom dia' means 'Good morning' and is used until noon.",
		"options": ["Good morning", "Good afternoon", "Good evening", "Good night"],
	},
	{
		"question": "What does 'Boa tarde' mean?",
		"correct_answer": "Good afternoon",
		"explanation": "'Boa tarde' means 'Good afternoon' and is used from noon until sunset.",
		"options": ["Good morning", "Good afternoon", "Good evening", "Good night"],
	},
	{
		"question": "What does 'Boa noite' mean?",
		"correct_answer": "Good night",
		"explanation": "'Boa noite' means 'Good night' and can be used as both a greeting and farewell at night.",
		"options": ["Good night", "Good evening", "Good afternoon", "Goodbye"],
	},
	{
		"question": "What does 'Como vai?' mean?",
		"correct_answer": "How are you?",
		"explanation": "'Como vai?' is a casual way to ask 'How are you?' in Portuguese.",
		"options": ["How are you?", "What's your name?", "Where are you going?", "How old are you?"],
	},
]

# Each scenario is attached to the lesson with this title, or the last lesson when it is missing
SCENARIOS: List[Dict] = [
	{
		"lesson_title": "Ordering Food",
		"title": "Business Meeting",
		"description": "Practice participating in a business meeting in Portuguese",
		"context": "You're attending a team meeting at a Brazilian company. Practice discussing projects and deadlines with colleagues.",
		"difficulty": "intermediate",
		"category": "professional",
		"dialogues": [
			("native_speaker",
				"Bom dia a todos. Vamos começar a reunião. Primeiro, vamos falar sobre o projeto atual.",
				"Good morning everyone. Let's start the meeting. First, let's talk about the current project.",
				[], []),
			("user",
				"Bom dia. Tenho uma atualização sobre o projeto. Estamos progredindo bem, mas precisamos de mais tempo para a fase de testes.",
				"Good morning. I have an update about the project. We're progressing well, but we need more time for the testing phase.",
				["Give a project update", "Mention you need more time", "Talk about testing"],
				["Bom dia", "Atualização", "Projeto", "Precisamos de mais tempo", "Fase de testes"]),
			("native_speaker",
				"Entendo. Quanto tempo a mais você precisa para completar os testes?",
				"I understand. How much more time do you need to complete the tests?",
				[], []),
			("user",
				"Acredito que precisamos de mais duas semanas para garantir a qualidade do produto final.",
				"I believe we need two more weeks to ensure the quality of the final product.",
				["Specify how much time", "Mention quality", "Be professional"],
				["Duas semanas", "Mais duas semanas", "Garantir a qualidade", "Produto final"]),
			("native_speaker",
				"Certo. E como está o orçamento do projeto? Ainda estamos dentro do planejado?",
				"Okay. And how is the project budget? Are we still within what was planned?",
				[], []),
			("user",
				"Sim, estamos dentro do orçamento. Não prevejo custos adicionais para a extensão do prazo de testes.",
				"Yes, we are within budget. I don't foresee additional costs for extending the testing deadline.",
				["Mention budget status", "Talk about costs", "Be reassuring"],
				["Sim", "Dentro do orçamento", "Não prevejo custos adicionais", "Extensão do prazo"]),
			("native_speaker",
				"Excelente. Vamos agendar uma nova reunião para a próxima semana para revisar o progresso?",
				"Excellent. Shall we schedule a new meeting for next week to review progress?",
				[], []),
			("user",
				"Sim, podemos agendar para quarta-feira às 10h. Até lá, terei mais dados sobre os testes.",
				"Yes, we can schedule it for Wednesday at 10am. By then, I'll have more data on the testing.",
				["Agree to meeting", "Suggest time", "Mention you'll have updates"],
				["Sim", "Quarta-feira", "10h", "Mais dados", "Testes"]),
		],
	},
	{
		"lesson_title": "Shopping",
		"title": "Job Interview",
		"description": "Practice for a job interview in Portuguese",
		"context": "You have an interview for a position at a Brazilian tech company. Practice answering common interview questions in Portuguese.",
		"difficulty": "advanced",
		"category": "professional",
		"dialogues": [
			("native_speaker",
				"Bom dia! Obrigado por vir à entrevista hoje. Você poderia se apresentar e falar um pouco sobre sua experiência?",
				"Good morning! Thank you for coming to the interview today. Could you introduce yourself and tell me a bit about your experience?",
				[], []),
			("user",
				"Bom dia! Meu nome é [seu nome] e tenho experiência de cinco anos como desenvolvedor de software.",
				"Good morning! My name is [your name] and I have five years of experience as a software developer.",
				["Introduce yourself", "Mention your work experience", "Talk about your skills"],
				["Bom dia", "Meu nome é", "Tenho experiência", "Trabalhei em", "habilidades em"]),
			("native_speaker",
				"Excelente. E por que você está interessado em trabalhar na nossa empresa?",
				"Excellent. And why are you interested in working at our company?",
				[], []),
			("user",
				"Estou interessado na sua empresa porque admiro os produtos inovadores que vocês desenvolvem.",
				"I'm interested in your company because I admire the innovative products you develop.",
				["Explain why you're interested", "Mention their products", "Talk about the team"],
				["Estou interessado", "Admiro", "Produtos inovadores", "Fazer parte", "Equipe dinâmica"]),
			("native_speaker",
				"Quais são suas expectativas salariais e quando você poderia começar?",
				"What are your salary expectations and when could you start?",
				[], []),
			("user",
				"Minhas expectativas salariais estão alinhadas com o mercado, mas estou aberto a negociações. Poderia começar em duas semanas.",
				"My salary expectations are in line with the market, but I'm open to negotiation. I could start in two weeks.",
				["Discuss salary expectations", "Mention when you can start", "Be professional"],
				["Expectativas salariais", "Alinhadas com o mercado", "Aberto a negociações", "Começar em duas semanas"]),
		],
	},
]


def _lesson_for(title: str, lessons: Dict[str, schemas.Lesson]) -> Optional[schemas.Lesson]:
	if title in lessons:
		return lessons[title]
	return max(lessons.values(), key=lambda lesson: lesson.order, default=None)


def seed_storage(storage: Storage) -> schemas.User:
	"""Populate an empty storage with the demo curriculum. Returns the demo user."""
	user = storage.get_user_by_username(DEMO_USERNAME)
	if user is None:
		user = storage.create_user(
			schemas.UserCreate(
				username=DEMO_USERNAME,
				password=hash_password(DEMO_PASSWORD),
				display_name="Maria",
				level=3,
				xp=250,
			)
		)

	lessons: Dict[str, schemas.Lesson] = {}
	for data in LESSONS:
		lesson = storage.create_lesson(schemas.LessonCreate(**data))
		lessons[lesson.title] = lesson
	greetings = lessons["Basic Greetings"]

	for word in GREETINGS_VOCABULARY:
		storage.create_vocabulary(
			schemas.VocabularyCreate(lesson_id=greetings.id, audio_url=audio_path(word["portuguese"]), **word)
		)

	for item in GREETINGS_QUIZ:
		question = storage.create_quiz_question(
			schemas.QuizQuestionCreate(
				lesson_id=greetings.id,
				question=item["question"],
				correct_answer=item["correct_answer"],
				explanation=item["explanation"],
			)
		)
		for option in item["options"]:
			storage.create_quiz_option(
				schemas.QuizOptionCreate(
					question_id=question.id,
					option=option,
					is_correct=option == question.correct_answer,
				)
			)

	for data in SCENARIOS:
		lesson = _lesson_for(data["lesson_title"], lessons)
		if lesson is None:
			continue
		scenario = storage.create_conversation_scenario(
			schemas.ConversationScenarioCreate(
				lesson_id=lesson.id,
				title=data["title"],
				description=data["description"],
				context=data["context"],
				difficulty=data["difficulty"],
				category=data["category"],
			)
		)
		for order, (role, portuguese, english, hints, accepted) in enumerate(data["dialogues"], start=1):
			storage.create_conversation_dialogue(
				schemas.ConversationDialogueCreate(
					scenario_id=scenario.id,
					speaker_role=role,
					portuguese=portuguese,
					english=english,
					audio_url=audio_path(portuguese) if role == "native_speaker" else None,
					order=order,
					hints=hints,
					accepted_responses=accepted,
				)
			)
		storage.create_user_conversation_practice(
			schemas.UserConversationPracticeCreate(user_id=user.id, scenario_id=scenario.id)
		)

	storage.create_user_progress(schemas.UserProgressCreate(user_id=user.id, lesson_id=greetings.id))
	logger.info(
		"Seeded %d lessons, %d vocabulary words, %d quiz questions, %d scenarios",
		len(LESSONS), len(GREETINGS_VOCABULARY), len(GREETINGS_QUIZ), len(SCENARIOS),
	)
	return user


def seed_if_empty(storage: Storage) -> bool:
	if not storage.is_empty():
		return False
	seed_storage(storage)
	return True


if __name__ == "__main__":
	from .logging_config import setup_logging
	from .settings import settings
	from .storage import build_storage

	setup_logging()
	target = build_storage(settings.storage_backend)
	target.prepare()
	if seed_if_empty(target):
		logger.info("Seed complete")
	else:
		logger.info("Storage already has lessons, nothing to seed")
