"""
StudyBuddy - Study Tracker Discord Bot
Main entry point: slash commands over the gamification engine
"""
import discord
from discord.ext import commands
from discord import app_commands
import os
import threading
from flask import Flask

# Import our modular components
from src.database.setup import db_setup
from src.database.storage import kv_store
from src.gamification.economy import economy_ledger
from src.gamification.engine import GamificationEngine
from src.gamification.gacha_system import SPIN_COST, MULTI_SPIN_COUNT, PITY_THRESHOLD, gacha_system
from src.gamification.models import Rarity
from src.gamification.pet_library import pet_library
from src.gamification.pet_manager import MAX_EQUIPPED
from src.gamification.quest_system import quest_system

# Bot setup
intents = discord.Intents.default()
bot = commands.Bot(command_prefix='!', intents=intents, help_command=None)

# One engine per Discord user, created on first use
engines = {}

RARITY_COLORS = {
    Rarity.COMMON: 0x95a5a6,
    Rarity.RARE: 0x3498db,
    Rarity.EPIC: 0x9b59b6,
    Rarity.LEGENDARY: 0xf1c40f,
    Rarity.MYTHICAL: 0xe74c3c,
    Rarity.SECRET: 0xff6ec7,
}

FOOD_CHOICES = [app_commands.Choice(name=food['name'], value=food['id']) for food in pet_library.get_all_foods()]

DEFAULT_STUDY_STATS = {'tasksCompleted': 0, 'studyMinutes': 0, 'pomodorosCompleted': 0}


def get_config(key):
    """Get configuration value"""
    return kv_store.get_config(key)


def game_enabled():
    return get_config('game_enabled') != 'False'


def quest_poll_minutes():
    try:
        return max(1, int(get_config('quest_poll_minutes') or '1'))
    except ValueError:
        print("[CONFIG] ⚠️ quest_poll_minutes is not a number, polling every minute")
        return 1


def get_engine(user_id):
    """Get (or load) the engine for a user and start its quest reset poll"""
    if user_id not in engines:
        print(f"[ENGINE] Loading game data for {user_id}")
        engine = GamificationEngine(user_id=user_id)
        engine.start_quest_poll(quest_poll_minutes() * 60)
        engines[user_id] = engine
    return engines[user_id]


def record_study_stats(user_id, tasks_delta=0, minutes_delta=0, pomodoros_delta=0):
    """Update a user's lifetime study totals and feed them to achievements"""
    stats = dict(DEFAULT_STUDY_STATS)
    stats.update(kv_store.load('studyLogs', user_id, default={}) or {})
    stats['tasksCompleted'] = max(0, stats['tasksCompleted'] + tasks_delta)
    stats['studyMinutes'] = max(0, stats['studyMinutes'] + minutes_delta)
    stats['pomodorosCompleted'] = max(0, stats['pomodorosCompleted'] + pomodoros_delta)

    if not kv_store.save('studyLogs', stats, user_id):
        print(f"[STORAGE] ⚠️ Study stats for {user_id} were not saved")

    return get_engine(user_id).update_achievements({
        'tasks_completed': stats['tasksCompleted'],
        'study_minutes': stats['studyMinutes'],
        'pomodoros_completed': stats['pomodorosCompleted'],
    })


def add_achievements(result, achievement_result):
    """Fold achievement unlocks (and any level-up they cause) into an action's reply"""
    if not achievement_result.success:
        return
    for quest in achievement_result.value or []:
        result.message += f"\n🏆 Achievement unlocked: {quest.title} (+{quest.reward['xp']} XP, +{quest.reward['coins']} coins)"
    if achievement_result.level_up:
        result.level_up = max(result.level_up or 0, achievement_result.level_up)


def resolve_pet_id(engine, pet_number):
    """Map the 1-based number shown in /pets to a pet id"""
    pets = engine.game.collection.pets
    if 1 <= pet_number <= len(pets):
        return pets[pet_number - 1].id
    return str(pet_number)


def format_modifiers(pet):
    parts = [f"+{value}% {kind}" for kind, value in pet.buffs.items()]
    parts += [f"-{value}% {kind}" for kind, value in pet.debuffs.items()]
    return ", ".join(parts) if parts else "No modifiers"


def pet_summary(pet):
    rarity_emoji = pet_library.rarities[pet.rarity]['emoji']
    line = (f"{rarity_emoji} {pet.rarity.value} • Lv {pet.level} ({pet.exp}/{pet.exp_for_next_level} exp)\n"
            f"⚡ {pet.energy} energy • 🍽️ {pet.hunger} hunger • 😊 {pet.mood.value}\n"
            f"✨ {format_modifiers(pet)}")
    if pet.special_buff:
        line += f"\n🌟 Special buff: +{pet.special_buff.exp_boost_percent}% exp"
    return line


async def send_result(interaction, result, title, color=0x00ff00):
    """Reply with an engine ActionResult as an embed"""
    if not result.success:
        embed = discord.Embed(title="❌ Can't do that", description=result.message, color=0xff0000)
        await interaction.response.send_message(embed=embed, ephemeral=True)
        return

    embed = discord.Embed(title=title, description=result.message, color=color)
    if result.level_up:
        template = get_config('level_up_message') or 'Congratulations {user}! You reached level {level}!'
        level_text = template.format(user=interaction.user.mention, level=result.level_up)
        embed.add_field(name="🎉 Level Up!", value=level_text, inline=False)
        await announce(level_text)
    await interaction.response.send_message(embed=embed)


async def announce(text):
    """Post to the configured announcement channel, if any"""
    channel_id = get_config('announce_channel')
    if not channel_id or channel_id == 'None':
        return
    try:
        channel = bot.get_channel(int(channel_id))
    except ValueError:
        print(f"[ANNOUNCE] ⚠️ announce_channel is not a channel id: {channel_id}")
        return
    if channel:
        await channel.send(text)


# Bot Events
@bot.event
async def on_ready():
    print(f'[BOT_STARTUP] {bot.user} has connected to Discord!')

    # Initialize database
    try:
        print("[BOT_STARTUP] Initializing database...")
        db_setup.initialize_database()
        print("[BOT_STARTUP] Database initialization complete")
    except Exception as e:
        print(f"[BOT_STARTUP] Database initialization failed: {e}")

    # Sync slash commands
    try:
        print("[BOT_STARTUP] 🔄 Syncing slash commands...")
        synced = await bot.tree.sync()
        print(f"[BOT_STARTUP] ✅ Successfully synced {len(synced)} slash command(s)")

        for cmd in synced:
            print(f"[BOT_STARTUP] - Synced command: /{cmd.name}")

    except Exception as e:
        print(f"[BOT_STARTUP] ❌ Failed to sync slash commands: {e}")


# Profile and economy
@bot.tree.command(name='profile', description='View your level, coins, and equipped pets')
@app_commands.describe(user='User to view (optional)')
async def profile_slash(interaction: discord.Interaction, user: discord.Member | None = None):
    """Show level progress, coins, and active pet modifiers"""
    target = user or interaction.user
    profile = get_engine(target.id).get_profile()
    progress = profile['progress']

    embed = discord.Embed(title=f"📚 {target.display_name}'s Profile", color=0x3498db)
    embed.add_field(name="Level", value=str(progress['level']), inline=True)
    embed.add_field(name="XP", value=f"{progress['xp']}/{progress['xpForNextLevel']}", inline=True)
    embed.add_field(name="Coins", value=f"🪙 {profile['coins']}", inline=True)

    equipped = profile['equipped']
    embed.add_field(
        name=f"🐾 Equipped Pets ({len(equipped)}/{MAX_EQUIPPED})",
        value="\n".join(f"{pet.name} (Lv {pet.level})" for pet in equipped) or "None equipped",
        inline=False
    )

    active = {kind: value for kind, value in profile['modifiers'].items() if value}
    embed.add_field(
        name="✨ Active Modifiers",
        value="\n".join(f"{kind}: {value}%" for kind, value in active.items()) or "None",
        inline=False
    )
    embed.set_footer(text=f"Pity: {profile['pity_counter']}/{PITY_THRESHOLD} • Spins: {profile['spin_count']} • "
                          f"Theme: {profile['theme']}")
    await interaction.response.send_message(embed=embed)


@bot.tree.command(name='task_done', description='Mark a study task as complete')
async def task_done_slash(interaction: discord.Interaction):
    """Reward a completed task"""
    if not game_enabled():
        await interaction.response.send_message("The study game is currently disabled.", ephemeral=True)
        return

    result = get_engine(interaction.user.id).complete_task()
    if result.success:
        add_achievements(result, record_study_stats(interaction.user.id, tasks_delta=1))
    await send_result(interaction, result, "✅ Task Complete")


@bot.tree.command(name='task_undo', description='Undo a task completion')
async def task_undo_slash(interaction: discord.Interaction):
    """Take back the reward for a task marked incomplete"""
    result = get_engine(interaction.user.id).uncomplete_task()
    if result.success:
        add_achievements(result, record_study_stats(interaction.user.id, tasks_delta=-1))
    await send_result(interaction, result, "↩️ Task Undone", color=0xf39c12)


@bot.tree.command(name='focus', description='Log a finished focus session')
@app_commands.describe(minutes='How long you focused', pomodoro='Was this a pomodoro session? (default: yes)')
async def focus_slash(interaction: discord.Interaction, minutes: int, pomodoro: bool = True):
    """Reward a focus session scaled by its length"""
    if not game_enabled():
        await interaction.response.send_message("The study game is currently disabled.", ephemeral=True)
        return

    result = get_engine(interaction.user.id).complete_focus_session(minutes, pomodoro)
    if result.success:
        add_achievements(result, record_study_stats(interaction.user.id, minutes_delta=minutes,
                                                    pomodoros_delta=1 if pomodoro else 0))
        reward = result.value
        result.message += f"\n⭐ +{reward['xp']} base XP • 🪙 +{reward['coins']} base coins • ⚡ +{reward['energyBoost']} pet energy"
    await send_result(interaction, result, "🍅 Focus Session Complete")


# Gacha
@bot.tree.command(name='spin', description=f'Spin for a new pet ({SPIN_COST} coins)')
async def spin_slash(interaction: discord.Interaction):
    """Single gacha spin"""
    if not game_enabled():
        await interaction.response.send_message("The study game is currently disabled.", ephemeral=True)
        return

    result = get_engine(interaction.user.id).spin()
    if not result.success:
        await send_result(interaction, result, "")
        return

    pet = result.value
    embed = discord.Embed(title=f"🎰 {pet.name}!", description=pet_summary(pet), color=RARITY_COLORS[pet.rarity])
    embed.set_footer(text="Use /pets to see your collection • /equip to put it to work")
    await interaction.response.send_message(embed=embed)


@bot.tree.command(name='spin10', description=f'Spin {MULTI_SPIN_COUNT} times ({SPIN_COST * MULTI_SPIN_COUNT} coins)')
async def spin10_slash(interaction: discord.Interaction):
    """Ten spins as one purchase"""
    if not game_enabled():
        await interaction.response.send_message("The study game is currently disabled.", ephemeral=True)
        return

    result = get_engine(interaction.user.id).spin_many(MULTI_SPIN_COUNT)
    if not result.success:
        await send_result(interaction, result, "")
        return

    best = max(result.value, key=lambda pet: pet.rarity.rank)
    embed = discord.Embed(title="🎰 Multi-Spin Results", description=result.message, color=RARITY_COLORS[best.rarity])
    for i, pet in enumerate(result.value, 1):
        rarity_text = pet.rarity.value
        if pet.rarity.is_rare_or_above():
            rarity_text = f"**{rarity_text}**"
        embed.add_field(name=f"{i}. {pet.name}", value=rarity_text, inline=True)
    await interaction.response.send_message(embed=embed)


@bot.tree.command(name='rates', description='View pet drop rates')
async def rates_slash(interaction: discord.Interaction):
    """Show drop chances per rarity"""
    embed = discord.Embed(title="🎲 Drop Rates", color=0x00d4ff)
    for rarity, chance in gacha_system.get_drop_rates().items():
        embed.add_field(name=rarity, value=f"{chance:.1f}%", inline=True)
    embed.set_footer(text="Every 10th spin without a Rare or better is guaranteed Rare+")
    await interaction.response.send_message(embed=embed)


# Pet Collection View with Navigation Buttons
class PetCollectionView(discord.ui.View):
    def __init__(self, user_id: int, pets: list, equipped: list):
        super().__init__(timeout=300)  # 5 minute timeout
        self.user_id = user_id
        self.pets = pets
        self.equipped = equipped
        self.current_page = 1
        self.pets_per_page = 4
        self.total_pages = max(1, (len(pets) + self.pets_per_page - 1) // self.pets_per_page)

        self.update_buttons()

    def update_buttons(self):
        self.prev_page.disabled = (self.current_page == 1)
        self.next_page.disabled = (self.current_page == self.total_pages)

    def create_embed(self):
        start_idx = (self.current_page - 1) * self.pets_per_page
        page_pets = self.pets[start_idx:start_idx + self.pets_per_page]

        embed = discord.Embed(
            title="🐾 Your Pet Sanctuary",
            description=f"**Page {self.current_page}/{self.total_pages}** • {len(self.pets)} pets",
            color=0x3498db
        )

        for number, pet in enumerate(page_pets, start_idx + 1):
            marker = " ⭐" if pet.id in self.equipped else ""
            embed.add_field(name=f"#{number} {pet.name}{marker}", value=pet_summary(pet), inline=False)

        embed.set_footer(text="⭐ = equipped • Use the pet number with /equip, /feed, /play")
        return embed

    @discord.ui.button(label='◀️', style=discord.ButtonStyle.primary)
    async def prev_page(self, interaction: discord.Interaction, button: discord.ui.Button):
        if interaction.user.id != self.user_id:
            await interaction.response.send_message("❌ You can only navigate your own pets!", ephemeral=True)
            return

        self.current_page = max(1, self.current_page - 1)
        self.update_buttons()
        await interaction.response.edit_message(embed=self.create_embed(), view=self)

    @discord.ui.button(label='▶️', style=discord.ButtonStyle.primary)
    async def next_page(self, interaction: discord.Interaction, button: discord.ui.Button):
        if interaction.user.id != self.user_id:
            await interaction.response.send_message("❌ You can only navigate your own pets!", ephemeral=True)
            return

        self.current_page = min(self.total_pages, self.current_page + 1)
        self.update_buttons()
        await interaction.response.edit_message(embed=self.create_embed(), view=self)


@bot.tree.command(name='pets', description='View your pet collection')
async def pets_slash(interaction: discord.Interaction):
    """Paginated pet collection"""
    engine = get_engine(interaction.user.id)
    pets = engine.game.collection.pets
    if not pets:
        await interaction.response.send_message(f"You don't have any pets yet! Use `/spin` ({SPIN_COST} coins).",
                                                ephemeral=True)
        return

    view = PetCollectionView(interaction.user.id, pets, engine.game.collection.equipped)
    await interaction.response.send_message(embed=view.create_embed(), view=view)


@bot.tree.command(name='equip', description=f'Equip a pet (max {MAX_EQUIPPED})')
@app_commands.describe(pet_number='Pet number from /pets')
async def equip_slash(interaction: discord.Interaction, pet_number: int):
    engine = get_engine(interaction.user.id)
    result = engine.equip(resolve_pet_id(engine, pet_number))
    await send_result(interaction, result, "🐾 Pet Equipped")


@bot.tree.command(name='unequip', description='Unequip a pet')
@app_commands.describe(pet_number='Pet number from /pets')
async def unequip_slash(interaction: discord.Interaction, pet_number: int):
    engine = get_engine(interaction.user.id)
    result = engine.unequip(resolve_pet_id(engine, pet_number))
    await send_result(interaction, result, "🐾 Pet Unequipped")


@bot.tree.command(name='release', description='Release a pet from your collection')
@app_commands.describe(pet_number='Pet number from /pets')
async def release_slash(interaction: discord.Interaction, pet_number: int):
    engine = get_engine(interaction.user.id)
    result = engine.delete_pet(resolve_pet_id(engine, pet_number))
    await send_result(interaction, result, "👋 Pet Released", color=0x95a5a6)


@bot.tree.command(name='feed', description='Feed one of your pets')
@app_commands.describe(pet_number='Pet number from /pets', food='Food to use', quantity='How many (default: 1)')
@app_commands.choices(food=FOOD_CHOICES)
async def feed_slash(interaction: discord.Interaction, pet_number: int, food: app_commands.Choice[str], quantity: int = 1):
    engine = get_engine(interaction.user.id)
    result = engine.feed(resolve_pet_id(engine, pet_number), food.value, quantity)
    await send_result(interaction, result, "🍽️ Feeding Time")


@bot.tree.command(name='play', description='Play with one of your pets')
@app_commands.describe(pet_number='Pet number from /pets')
async def play_slash(interaction: discord.Interaction, pet_number: int):
    engine = get_engine(interaction.user.id)
    result = engine.play(resolve_pet_id(engine, pet_number))
    await send_result(interaction, result, "🎾 Playtime")


# Shop
@bot.tree.command(name='shop', description='Browse food, themes, and frames')
async def shop_slash(interaction: discord.Interaction):
    engine = get_engine(interaction.user.id)
    game = engine.game
    embed = discord.Embed(title="🛒 Shop", description=f"🪙 You have **{game.economy.coins}** coins", color=0x2ecc71)
    embed.add_field(
        name="🍽️ Food",
        value="\n".join(f"{food['icon']} {food['name']} - {shop_price(engine, food)} (owned {game.food_inventory.get(food['id'], 0)})"
                        for food in pet_library.get_all_foods()),
        inline=False
    )
    embed.add_field(
        name="🎨 Themes",
        value="\n".join(f"{theme['icon']} {theme['name']} - "
                        f"{'owned' if theme['id'] in game.unlocked_themes else shop_price(engine, theme)}"
                        for theme in pet_library.get_all_themes()),
        inline=False
    )
    embed.set_footer(text="Use /buy_food to stock up • Equipped pets with priceIncrease raise prices")
    await interaction.response.send_message(embed=embed)


def shop_price(engine, item):
    return economy_ledger.shop_price(engine.game, item['cost'])


@bot.tree.command(name='buy_food', description='Buy pet food')
@app_commands.describe(food='Food to buy', quantity='How many (default: 1)')
@app_commands.choices(food=FOOD_CHOICES)
async def buy_food_slash(interaction: discord.Interaction, food: app_commands.Choice[str], quantity: int = 1):
    result = get_engine(interaction.user.id).buy_food(food.value, quantity)
    await send_result(interaction, result, "🛒 Purchase Complete")


# Quests
@bot.tree.command(name='quests', description='View your daily and weekly quests')
async def quests_slash(interaction: discord.Interaction):
    engine = get_engine(interaction.user.id)
    engine.check_quest_resets()
    book = engine.quests
    resets = engine.get_reset_times()

    embed = discord.Embed(title="📜 Quests", color=0x9b59b6)
    for label, quest_set, reset_at in (("Daily", book.daily, resets['daily']), ("Weekly", book.weekly, resets['weekly'])):
        lines = []
        for quest in quest_set.quests:
            status = "✅" if quest.completed else f"{quest_system.quest_progress(book, quest):g}/{quest.target:g}"
            lines.append(f"{quest.icon} **{quest.title}** ({status}) • {quest.reward['xp']} XP, {quest.reward['coins']} 🪙")
        embed.add_field(
            name=f"{label} • resets <t:{int(reset_at.timestamp())}:R>",
            value="\n".join(lines) or "No quests",
            inline=False
        )

    unlocked = sum(1 for quest in book.achievements if quest.completed)
    embed.set_footer(text=f"Achievements unlocked: {unlocked}/{len(book.achievements)}")
    await interaction.response.send_message(embed=embed)


@bot.tree.command(name='help', description='Show all available commands')
async def help_slash(interaction: discord.Interaction):
    embed = discord.Embed(
        title="📚 StudyBuddy Commands",
        description="Study, earn coins, and raise a team of pets!",
        color=0x00d4ff
    )
    embed.add_field(
        name="📖 Study",
        value="🔹 `/task_done` - Complete a task\n🔹 `/task_undo` - Undo a completion\n🔹 `/focus` - Log a focus session\n🔹 `/quests` - Daily and weekly quests",
        inline=False
    )
    embed.add_field(
        name="🐾 Pets",
        value="🔹 `/spin` / `/spin10` - Get new pets\n🔹 `/pets` - Your collection\n🔹 `/equip` `/unequip` `/release`\n🔹 `/feed` `/play` - Care for your pets",
        inline=False
    )
    embed.add_field(
        name="🛒 Economy",
        value="🔹 `/profile` - Level and coins\n🔹 `/shop` - Browse items\n🔹 `/buy_food` - Buy food\n🔹 `/rates` - Drop rates",
        inline=False
    )
    await interaction.response.send_message(embed=embed, ephemeral=True)


# Admin commands
@bot.tree.command(name='give_coins', description='Give coins or XP to a user (Admin only)')
@app_commands.default_permissions(administrator=True)
@app_commands.describe(user='User to reward', coins='Coins to give', xp='XP to give (default: 0)')
async def give_coins_slash(interaction: discord.Interaction, user: discord.Member, coins: int, xp: int = 0):
    """Grant coins/XP - Admin only"""
    print(f"[GIVE_COINS] User: {user.id}, Coins: {coins}, XP: {xp}")
    result = get_engine(user.id).apply_delta(xp, coins, f"Admin grant by {interaction.user.display_name}")
    await send_result(interaction, result, "✅ Reward Given")


@bot.tree.command(name='reset_quests', description='Force a quest reset for a user (Admin only)')
@app_commands.default_permissions(administrator=True)
@app_commands.describe(user='User whose quests to reset', scope='daily, weekly, or all')
@app_commands.choices(scope=[
    app_commands.Choice(name='Daily', value='daily'),
    app_commands.Choice(name='Weekly', value='weekly'),
    app_commands.Choice(name='All quest data', value='all'),
])
async def reset_quests_slash(interaction: discord.Interaction, user: discord.Member, scope: app_commands.Choice[str]):
    """Force-reset quests - Admin only"""
    engine = get_engine(user.id)
    if scope.value == 'daily':
        result = engine.reset_daily_quests()
    elif scope.value == 'weekly':
        result = engine.reset_weekly_quests()
    else:
        result = engine.reset_quests()
    await send_result(interaction, result, "🔄 Quests Reset", color=0xf39c12)


@bot.tree.command(name='set_config', description='Configure bot settings (Staff only)')
@app_commands.default_permissions(administrator=True)
@app_commands.describe(key='Configuration key', value='Configuration value')
async def set_config_slash(interaction: discord.Interaction, key: str, value: str):
    """Set bot configuration - Staff only"""
    try:
        success = kv_store.set_config(key, value)

        if success:
            embed = discord.Embed(
                title="✅ Configuration Updated",
                description="Successfully updated configuration",
                color=0x00ff00
            )
            embed.add_field(name="Key", value=f"`{key}`", inline=True)
            embed.add_field(name="Value", value=f"`{value}`", inline=True)
            await interaction.response.send_message(embed=embed)
        else:
            await interaction.response.send_message("❌ Failed to update configuration", ephemeral=True)
    except Exception as e:
        await interaction.response.send_message(f"❌ Error updating config: {str(e)}", ephemeral=True)


@bot.tree.command(name='get_config', description='List all configuration keys and values (Staff only)')
@app_commands.default_permissions(administrator=True)
async def get_config_slash(interaction: discord.Interaction):
    """List configuration - Staff only"""
    config = kv_store.list_config()
    embed = discord.Embed(title="⚙️ Configuration", color=0x3498db)
    for key, value in config.items():
        embed.add_field(name=key, value=f"`{value}`", inline=False)
    if not config:
        embed.description = "No configuration stored yet."
    await interaction.response.send_message(embed=embed, ephemeral=True)


# Flask web server for cloud hosting
app = Flask(__name__)


@app.route('/')
def home():
    return "StudyBuddy is running! 📚"


@app.route('/health')
def health():
    return {"status": "healthy", "bot": "online", "loaded_users": len(engines)}


def run_flask():
    port = int(os.environ.get('PORT', 10000))
    app.run(host='0.0.0.0', port=port, debug=False, use_reloader=False)


if __name__ == '__main__':
    token = os.getenv('DISCORD_TOKEN')
    print(f"[MAIN] Discord token present: {bool(token)}")

    if not token:
        print("[MAIN] ❌ Please set the DISCORD_TOKEN environment variable")
    else:
        # Start Flask server in a separate thread for cloud hosting
        flask_thread = threading.Thread(target=run_flask)
        flask_thread.daemon = True
        flask_thread.start()

        print("[MAIN] Flask server started")
        print("[MAIN] Starting StudyBuddy...")

        try:
            bot.run(token)
        except Exception as e:
            print(f"[MAIN] ❌ Bot error: {e}")
            import traceback
            traceback.print_exc()
            flask_thread.join()
