"""
Catalog of selectable habit goals and their daily micro-step programs.
"""
from typing import List, Optional

from myfocus.core.config import HABIT_PROGRAM_DAYS, HabitCategory
from myfocus.habits.models import HabitGoal, MicroStep

HABIT_GOALS = [
    HabitGoal(
        category=HabitCategory.HEALTH,
        title="Здоровое питание",
        subtitle="Маленькие изменения в тарелке каждый день",
        icon="🥗",
        gradient="from-green-400 to-emerald-500",
    ),
    HabitGoal(
        category=HabitCategory.FITNESS,
        title="Больше движения",
        subtitle="От пары минут до ежедневной тренировки",
        icon="🏃",
        gradient="from-orange-400 to-red-500",
    ),
    HabitGoal(
        category=HabitCategory.SLEEP,
        title="Крепкий сон",
        subtitle="Режим, который восстанавливает",
        icon="😴",
        gradient="from-indigo-400 to-purple-500",
    ),
    HabitGoal(
        category=HabitCategory.MINDFULNESS,
        title="Осознанность",
        subtitle="Минуты тишины и внимания к себе",
        icon="🧘",
        gradient="from-sky-400 to-blue-500",
    ),
    HabitGoal(
        category=HabitCategory.LEARNING,
        title="Учиться каждый день",
        subtitle="Понемногу, но без пропусков",
        icon="📚",
        gradient="from-amber-400 to-yellow-500",
    ),
]


def get_goal(category) -> Optional[HabitGoal]:
    try:
        category = HabitCategory(category)
    except ValueError:
        return None
    return next((goal for goal in HABIT_GOALS if goal.category == category), None)

# Ten stages per goal; each stage covers an equal share of the program days
PROGRAM_STAGES = {
    HabitCategory.HEALTH: [
        ("Стакан воды утром", "Начни день со стакана воды до завтрака."),
        ("Овощи к обеду", "Добавь порцию овощей к обеду."),
        ("Без сладких напитков", "Замени газировку и соки водой или чаем."),
        ("Завтрак с белком", "Добавь к завтраку яйца, творог или йогурт."),
        ("Фрукт вместо десерта", "После еды выбери фрукт вместо сладкого."),
        ("Ужин за 3 часа до сна", "Заканчивай ужин не позже чем за три часа до сна."),
        ("Медленная еда", "Ешь без телефона и откладывай вилку между кусочками."),
        ("Цельные злаки", "Выбери крупу или цельнозерновой хлеб вместо белого."),
        ("Меню на завтра", "Вечером запиши, что будешь есть завтра."),
        ("Готовлю сам", "Приготовь хотя бы один приём пищи дома."),
    ],
    HabitCategory.FITNESS: [
        ("Пять минут движения", "Пройдись или разомнись пять минут."),
        ("Лестница вместо лифта", "Поднимись пешком хотя бы на два этажа."),
        ("Утренняя зарядка", "Сделай десять минут простой зарядки."),
        ("Прогулка 20 минут", "Выйди на прогулку в быстром темпе."),
        ("Приседания", "Сделай три подхода по пятнадцать приседаний."),
        ("Планка", "Простой в планке три раза по тридцать секунд."),
        ("Растяжка вечером", "Потрать десять минут на растяжку перед сном."),
        ("Кардио 30 минут", "Бег, велосипед или плавание в спокойном темпе."),
        ("Силовая тренировка", "Полноценная тренировка на всё тело."),
        ("Активный день", "Набери не меньше десяти тысяч шагов."),
    ],
    HabitCategory.SLEEP: [
        ("Время отбоя", "Выбери время отбоя и запиши его."),
        ("Без кофе после обеда", "Последняя чашка кофе до 14:00."),
        ("Экран прочь за 30 минут", "Убери телефон за полчаса до сна."),
        ("Проветривание", "Проветри спальню перед сном."),
        ("Подъём в одно время", "Вставай в одно и то же время, даже в выходные."),
        ("Вечерний ритуал", "Книга, душ или дыхание: одно и то же каждый вечер."),
        ("Темнота в спальне", "Закрой шторы и убери источники света."),
        ("Утренний свет", "Выйди на дневной свет в первый час после подъёма."),
        ("Без экрана за час", "Убери все экраны за час до сна."),
        ("Восемь часов", "Ложись так, чтобы проспать не меньше восьми часов."),
    ],
    HabitCategory.MINDFULNESS: [
        ("Три вдоха", "Сделай три медленных глубоких вдоха."),
        ("Благодарность", "Запиши одну вещь, за которую ты благодарен."),
        ("Минута тишины", "Посиди минуту в тишине, наблюдая за дыханием."),
        ("Осознанная еда", "Съешь один приём пищи без отвлечений."),
        ("Медитация 5 минут", "Пять минут медитации с фокусом на дыхании."),
        ("Прогулка без телефона", "Пройдись десять минут, замечая звуки и запахи."),
        ("Дневник", "Запиши, что ты чувствуешь сегодня."),
        ("Сканирование тела", "Десять минут внимания к ощущениям в теле."),
        ("Медитация 15 минут", "Пятнадцать минут практики без перерыва."),
        ("День внимания", "Возвращай внимание в настоящее каждый час."),
    ],
    HabitCategory.LEARNING: [
        ("Одна страница", "Прочитай одну страницу книги."),
        ("Новое слово", "Выучи одно новое слово или термин."),
        ("Десять минут чтения", "Читай десять минут без отвлечений."),
        ("Конспект", "Запиши главную мысль прочитанного."),
        ("Урок 15 минут", "Пройди короткий урок онлайн-курса."),
        ("Повторение", "Повтори то, что выучил на прошлой неделе."),
        ("Практика", "Примени новое знание в деле."),
        ("Полчаса учёбы", "Учись тридцать минут подряд."),
        ("Объясни другому", "Расскажи кому-нибудь, что ты узнал."),
        ("Итоги", "Подведи итог: что ты умеешь теперь, чего не умел раньше."),
    ],
}


def build_micro_steps(category, total_days: int = HABIT_PROGRAM_DAYS) -> List[MicroStep]:
    """Daily program for `category`: each stage repeats until the next one begins."""
    stages = PROGRAM_STAGES[HabitCategory(category)]
    steps = []
    for day in range(1, total_days + 1):
        title, description = stages[(day - 1) * len(stages) // total_days]
        steps.append(MicroStep(day=day, title=title, description=description))
    return steps
