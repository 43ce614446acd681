from langchain_google_genai import ChatGoogleGenerativeAI


def build_llm(config):
    return ChatGoogleGenerativeAI(
        model=config.get('LLM_MODEL', 'gemini-1.5-flash'),
        google_api_key=config.get('GOOGLE_API_KEY'),
        temperature=0,
    )


def structured_chain(prompt, llm, schema):
    """prompt | llm constrained to return `schema` instances."""
    return prompt | llm.with_structured_output(schema)


def coerce(result, schema):
    # some providers hand back a plain dict instead of the model
    if result is None or isinstance(result, schema):
        return result
    return schema.model_validate(result)
