# galaxion/services/prompt_library.py
from langchain_core.prompts import PromptTemplate

PROMPT_LIBRARY = {
    "chat": PromptTemplate.from_template(
        """
**Instructions:** You are the AI tutor of NovaAI University, an online school about artificial intelligence. Answer the student's message clearly and briefly. Use plain language, give one concrete example where it helps, and encourage the student to keep going. If the lesson context is relevant, tie your answer to it.

**Lesson Context:**
---------------------
{context}
---------------------

**Student:** {message}

**Tutor:**
"""
    ),
    "explain": PromptTemplate.from_template(
        """
**Instructions:** You are an AI tutor. Explain the concept below to a newcomer in three short paragraphs: what it is, how it works, and where it is used in practice. Avoid jargon or define it when you use it.

**Lesson Context:**
---------------------
{context}
---------------------

**Concept:** {message}

**Explanation:**
"""
    ),
    "help": PromptTemplate.from_template(
        """
**Instructions:** You are an AI tutor. The student asks for help with a topic. Pitch the answer at the stated level ({level}), list the key ideas to understand first, and suggest a small exercise to practise.

**Lesson Context:**
---------------------
{context}
---------------------

**Topic:** {message}

**Help:**
"""
    ),
}

SUGGESTED_QUESTIONS = [
    "What is machine learning?",
    "How do neural networks work?",
    "What is the difference between AI and ML?",
    "What types of learning algorithms are there?",
    "How do I choose an algorithm for a task?",
    "What is overfitting?",
    "How do I evaluate a model?",
    "What data do I need for training?",
]

# Offline tutor answers, matched by keyword against the lower-cased prompt.
OFFLINE_KNOWLEDGE_BASE = [
    (
        ("machine learning", " ml "),
        "Machine learning is a branch of AI where a program learns patterns from examples instead of "
        "following hand-written rules. You show it many labelled examples (say, e-mails marked spam or "
        "not spam) and it builds a model that can label new ones.",
    ),
    (
        ("neural network", "neuron", "deep learning"),
        "A neural network is a stack of simple units (neurons) that each weigh their inputs and pass the "
        "result on. Training adjusts those weights so the network's output gets closer to the right answer. "
        "Deep learning just means many such layers.",
    ),
    (
        ("overfit",),
        "Overfitting happens when a model memorises its training data, noise included, and then performs "
        "poorly on new data. Hold out a validation set, keep the model simple, and gather more data to avoid it.",
    ),
    (
        ("prompt",),
        "A good prompt states the role, the task, the context and the expected format. Give an example of the "
        "output you want and ask the model to think step by step for harder tasks.",
    ),
    (
        ("bias", "fairness", "ethic"),
        "AI systems inherit bias from the data they learn from. Check who is represented in your data, measure "
        "results for different groups, and keep a human in the loop for decisions that affect people.",
    ),
    (
        ("evaluate", "metric", "accuracy"),
        "Evaluate a model on data it has never seen. Accuracy is a start, but precision, recall and F1 tell you "
        "more when classes are imbalanced. Always compare against a simple baseline.",
    ),
    (
        ("data", "dataset"),
        "Training needs data that looks like the real cases the model will face: enough examples, correct labels "
        "and a fair spread of situations. Cleaning and labelling usually take most of the effort.",
    ),
    (
        ("algorithm",),
        "Learning algorithms fall into supervised (learn from labelled examples), unsupervised (find structure "
        "without labels) and reinforcement learning (learn by trial and reward). Start from the simplest one "
        "that fits your data and goal.",
    ),
    (
        ("artificial intelligence", " ai "),
        "Artificial intelligence is the broad field of making computers do tasks that normally need human "
        "intelligence. Machine learning is one way to build AI, and today the most successful one.",
    ),
]

OFFLINE_DEFAULT_ANSWER = (
    "That's a good question! I can explain AI fundamentals, machine learning, neural networks, prompt "
    "engineering and responsible AI. Could you tell me which part of the topic you'd like to explore?"
)

FALLBACK_APOLOGY = "Sorry, the AI tutor is unavailable right now. Please try again later."
