async def test_catalog_sorted_by_name(context, user):
    avatars = await context.avatars.fetch_avatars()
    names = [a.name for a in avatars]
    assert names == sorted(names)
    assert len(avatars) == 8


async def test_profile_created_on_first_access(context, user):
    profile = await context.avatars.fetch_user_profile()
    assert profile.user_id == context.auth_store.user.id
    assert profile.avatar.name == "Bear"

    again = await context.avatars.fetch_user_profile()
    assert again.id == profile.id
    assert await context.db.table("user_profiles").count() == 1


async def test_set_user_avatar(context, user):
    avatars = await context.avatars.fetch_avatars()
    fox = next(a for a in avatars if a.name == "Fox")
    await context.avatars.fetch_user_profile()

    profile = await context.avatars.set_user_avatar(fox.id)

    assert profile.avatar_id == fox.id
    assert profile.avatar.emoji == "🦊"
    assert context.avatars.user_profile == profile
